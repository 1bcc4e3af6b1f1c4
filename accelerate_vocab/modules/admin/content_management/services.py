"""
Content Service - modules, vocabulary items and onboarding slides.

Every mutation commits or rolls back as a unit. Validation problems raise
``ValidationError``; database failures are logged, rolled back and re-raised
for the route to flash.
"""
from __future__ import annotations

import os
import uuid
import zipfile
from typing import Any, Dict, List, Sequence, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename

from ....core.error_handlers import NotFoundError, ValidationError
from ....core.signals import content_created, content_deleted
from ....models import Module, OnboardingSlide, VocabItem, db
from ....utils.excel import OPTION_COLUMNS, parse_vocab_rows, read_excel_values
from ...games.logics.onboarding import EDITABLE_ICONS, SLIDE_COUNT

MODULE_FIELDS = ('title', 'description', 'subject', 'level', 'game_type', 'is_active')
ITEM_FIELDS = ('word', 'definition', 'example', 'category') + OPTION_COLUMNS + ('correct_option',)


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"Error while {action}: {exc}")
        raise


class ContentService:
    """Admin-side content management."""

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    @staticmethod
    def list_modules() -> List[Module]:
        return Module.query.order_by(Module.created_at.desc(), Module.id.desc()).all()

    @staticmethod
    def get_module(module_id: int) -> Module:
        module = db.session.get(Module, module_id)
        if module is None:
            raise NotFoundError('Module not found', resource='module')
        return module

    @staticmethod
    def _apply_module_fields(module: Module, data: Dict[str, Any]) -> None:
        title = (data.get('title') or '').strip()
        if not title:
            raise ValidationError('Title is required')
        game_type = data.get('game_type') or Module.GAME_MATCHING
        if game_type not in Module.GAME_TYPES:
            raise ValidationError(f'Unknown game type: {game_type}')

        module.title = title
        module.description = _blank_to_none(data.get('description'))
        module.subject = _blank_to_none(data.get('subject'))
        module.level = _blank_to_none(data.get('level'))
        module.game_type = game_type
        module.is_active = bool(data.get('is_active', True))

    @staticmethod
    def create_module(data: Dict[str, Any]) -> Module:
        module = Module()
        ContentService._apply_module_fields(module, data)
        db.session.add(module)
        _commit('creating module')

        current_app.logger.info(f"Created module {module.id}: {module.title}")
        content_created.send(None, content_type='module', content_id=module.id, title=module.title)
        return module

    @staticmethod
    def update_module(module_id: int, data: Dict[str, Any]) -> Module:
        module = ContentService.get_module(module_id)
        ContentService._apply_module_fields(module, data)
        _commit(f'updating module {module_id}')
        current_app.logger.info(f"Updated module {module_id}")
        return module

    @staticmethod
    def delete_module(module_id: int) -> None:
        """Delete the module row only; its items, slides, assignments and sessions stay."""

        module = ContentService.get_module(module_id)
        db.session.delete(module)
        _commit(f'deleting module {module_id}')
        content_deleted.send(None, content_type='module', content_id=module_id)

    # ------------------------------------------------------------------
    # Vocabulary items
    # ------------------------------------------------------------------

    @staticmethod
    def items_query(module_id: int):
        """Query for a module's items, newest first."""

        return VocabItem.query.filter_by(module_id=module_id).order_by(
            VocabItem.created_at.desc(), VocabItem.id.desc()
        )

    @staticmethod
    def get_item(module_id: int, item_id: int) -> VocabItem:
        item = db.session.get(VocabItem, item_id)
        if item is None or item.module_id != module_id:
            raise NotFoundError('Question not found', resource='vocab_item')
        return item

    @staticmethod
    def _apply_item_fields(module: Module, item: VocabItem, data: Dict[str, Any]) -> None:
        values = {field: _blank_to_none(data.get(field)) for field in ITEM_FIELDS}
        if not values['word'] or not values['definition']:
            raise ValidationError('Word and definition are required')

        letter = (values['correct_option'] or 'A').upper()
        if module.game_type == Module.GAME_MULTIPLE_CHOICE:
            if not all(values[column] for column in OPTION_COLUMNS):
                raise ValidationError('Multiple choice questions need all four options')
            if letter not in VocabItem.OPTION_LETTERS:
                raise ValidationError('Correct option must be A, B, C or D')
        elif not values['option_a']:
            letter = None
        values['correct_option'] = letter

        for field, value in values.items():
            setattr(item, field, value)

    @staticmethod
    def create_item(module_id: int, data: Dict[str, Any]) -> VocabItem:
        module = ContentService.get_module(module_id)
        item = VocabItem(module_id=module.id)
        ContentService._apply_item_fields(module, item, data)
        db.session.add(item)
        _commit(f'adding a question to module {module_id}')

        content_created.send(None, content_type='vocab_item', content_id=item.id, title=item.word)
        return item

    @staticmethod
    def update_item(module_id: int, item_id: int, data: Dict[str, Any]) -> VocabItem:
        module = ContentService.get_module(module_id)
        item = ContentService.get_item(module_id, item_id)
        ContentService._apply_item_fields(module, item, data)
        _commit(f'updating question {item_id}')
        return item

    @staticmethod
    def delete_item(module_id: int, item_id: int) -> None:
        item = ContentService.get_item(module_id, item_id)
        db.session.delete(item)
        _commit(f'deleting question {item_id}')
        content_deleted.send(None, content_type='vocab_item', content_id=item_id)

    @staticmethod
    def import_items(module_id: int, file_storage) -> Tuple[int, List[str]]:
        """Import vocabulary rows from an uploaded .xlsx file.

        Returns the number of rows added and the warnings for skipped rows.
        The upload is written to UPLOAD_FOLDER for pandas/openpyxl to read and
        removed afterwards.
        """
        module = ContentService.get_module(module_id)
        upload_dir = current_app.config['UPLOAD_FOLDER']
        os.makedirs(upload_dir, exist_ok=True)
        filename = f"{uuid.uuid4().hex}_{secure_filename(file_storage.filename or 'import.xlsx')}"
        filepath = os.path.join(upload_dir, filename)
        file_storage.save(filepath)

        try:
            try:
                df = read_excel_values(filepath)
            except (OSError, ValueError, KeyError, zipfile.BadZipFile) as exc:
                # non-xlsx data surfaces as BadZipFile, InvalidFileException (a ValueError) or KeyError
                current_app.logger.warning(f"Could not read import file for module {module_id}: {exc}")
                raise ValidationError(f'Could not read the spreadsheet: {exc}')

            rows, warnings = parse_vocab_rows(
                df, require_options=module.game_type == Module.GAME_MULTIPLE_CHOICE
            )
            for row in rows:
                db.session.add(VocabItem(module_id=module.id, **row))
            _commit(f'importing questions into module {module_id}')
        finally:
            if os.path.exists(filepath):
                os.remove(filepath)

        current_app.logger.info(
            f"Imported {len(rows)} questions into module {module_id} ({len(warnings)} warnings)"
        )
        if rows:
            content_created.send(None, content_type='vocab_import', content_id=module.id, title=module.title)
        return len(rows), warnings

    # ------------------------------------------------------------------
    # Onboarding slides
    # ------------------------------------------------------------------

    @staticmethod
    def custom_slides(module_id: int) -> List[OnboardingSlide]:
        return (
            OnboardingSlide.query.filter_by(module_id=module_id)
            .order_by(OnboardingSlide.slide_number)
            .all()
        )

    @staticmethod
    def save_slides(module_id: int, slides: Sequence[Dict[str, Any]]) -> List[OnboardingSlide]:
        """Replace a module's slides with exactly three new ones."""

        module = ContentService.get_module(module_id)
        if len(slides) != SLIDE_COUNT:
            raise ValidationError(f'Exactly {SLIDE_COUNT} slides are required')

        allowed_icons = {icon.value for icon in EDITABLE_ICONS}
        rows = []
        for number, slide in enumerate(slides, start=1):
            content = (slide.get('content') or '').strip()
            if not content:
                raise ValidationError(f'Slide {number} needs some content')
            icon_name = slide.get('icon_name')
            if icon_name not in allowed_icons:
                raise ValidationError(f'Slide {number} has an unknown icon')
            rows.append(OnboardingSlide(
                module_id=module.id,
                slide_number=number,
                icon_name=icon_name,
                image_url=_blank_to_none(slide.get('image_url')),
                content=content,
            ))

        OnboardingSlide.query.filter_by(module_id=module.id).delete()
        db.session.add_all(rows)
        _commit(f'saving slides for module {module_id}')

        content_created.send(None, content_type='slides', content_id=module.id, title=module.title)
        return rows

    @staticmethod
    def reset_slides(module_id: int) -> int:
        """Delete custom slides so the game-type defaults apply again."""

        module = ContentService.get_module(module_id)
        deleted = OnboardingSlide.query.filter_by(module_id=module.id).delete()
        _commit(f'resetting slides for module {module_id}')
        content_deleted.send(None, content_type='slides', content_id=module.id)
        return deleted
