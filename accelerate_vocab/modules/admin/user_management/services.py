"""
Pupil Service - privileged account operations.

Creating, editing and deleting pupil accounts and toggling their module
assignments. Routes call these and turn the raised errors into flashes or
JSON error bodies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ....core.error_handlers import AuthorizationError, NotFoundError, ValidationError
from ....core.signals import module_assignment_changed
from ....models import Module, ModuleAssignment, Profile, User, UserRole, db

MIN_PASSWORD_LENGTH = 6

TEST_ACCOUNTS = (
    {'email': 'admin@accelerateVocab.com', 'password': 'admin123', 'name': 'Admin User', 'role': UserRole.ROLE_ADMIN},
    {'email': 'pupil@accelerateVocab.com', 'password': 'pupil123', 'name': 'Test Pupil', 'role': UserRole.ROLE_PUPIL},
)


@dataclass
class PupilRecord:
    """A pupil as listed on the admin screen."""

    id: int
    name: str
    email: str
    group_id: Optional[int] = None
    module_ids: List[int] = field(default_factory=list)


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')


def _role_of(profile: Profile) -> Optional[str]:
    row = UserRole.query.filter_by(user_id=profile.id).first()
    return row.role if row else None


class PupilService:
    """Service for pupil account management."""

    @staticmethod
    def list_pupils() -> List[PupilRecord]:
        """Pupils with their emails and assigned module ids, sorted by name."""

        rows = (
            db.session.query(Profile, User.email)
            .join(UserRole, UserRole.user_id == Profile.id)
            .join(User, User.user_id == Profile.auth_id)
            .filter(UserRole.role == UserRole.ROLE_PUPIL)
            .order_by(Profile.name)
            .all()
        )
        profile_ids = [profile.id for profile, _ in rows]
        assignments: dict[int, List[int]] = {pid: [] for pid in profile_ids}
        if profile_ids:
            for assignment in ModuleAssignment.query.filter(ModuleAssignment.user_id.in_(profile_ids)):
                assignments[assignment.user_id].append(assignment.module_id)

        return [
            PupilRecord(
                id=profile.id,
                name=profile.name,
                email=email or '',
                group_id=profile.group_id,
                module_ids=sorted(assignments.get(profile.id, [])),
            )
            for profile, email in rows
        ]

    @staticmethod
    def get_pupil(profile_id: int) -> Profile:
        profile = db.session.get(Profile, profile_id)
        if profile is None or _role_of(profile) != UserRole.ROLE_PUPIL:
            raise NotFoundError('Pupil not found', resource='pupil')
        return profile

    @staticmethod
    def _upsert_account(email: str, password: str, name: str, role: str, group_id=None) -> Profile:
        """Create the identity/profile/role trio, or refresh an existing one.

        An existing email gets the new password and name, and the role is
        added if missing. Does not commit.
        """
        email = User.normalize_email(email)
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email)
            db.session.add(user)
            current_app.logger.info("Creating account %s", email)
        else:
            current_app.logger.info("Account %s already exists, updating password and role", email)
        user.set_password(password)
        db.session.flush()

        profile = Profile.query.filter_by(auth_id=user.user_id).first()
        if profile is None:
            profile = Profile(auth_id=user.user_id, name=name, group_id=group_id)
            db.session.add(profile)
        else:
            profile.name = name
            if group_id is not None:
                profile.group_id = group_id
        db.session.flush()

        existing_role = _role_of(profile)
        if existing_role is not None and existing_role != role:
            raise ValidationError(f'That email already belongs to an account with the {existing_role} role')
        if existing_role is None:
            db.session.add(UserRole(user_id=profile.id, role=role))
            db.session.flush()
        return profile

    @staticmethod
    def create_pupil(email: str, password: str, name: str, group_id: Optional[int] = None) -> Profile:
        """Create a pupil account; an existing pupil email is updated instead."""

        email = (email or '').strip()
        name = (name or '').strip()
        password = password or ''
        if not email or not password or not name:
            raise ValidationError('Email, password and name are required')
        _check_password(password)

        try:
            profile = PupilService._upsert_account(email, password, name, UserRole.ROLE_PUPIL, group_id)
            db.session.commit()
        except ValidationError:
            db.session.rollback()
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error("Error creating pupil %s: %s", email, exc)
            raise

        current_app.logger.info("Pupil account ready: %s (profile %s)", email, profile.id)
        return profile

    @staticmethod
    def update_pupil(
        profile_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Profile:
        """Partial update: only the fields that are given (and non-empty) change."""

        profile = PupilService.get_pupil(profile_id)
        user = profile.user

        # Validate everything before touching the rows.
        if password:
            _check_password(password)
        new_email = User.normalize_email(email) if email and email.strip() else None
        if new_email:
            clash = User.query.filter(User.email == new_email, User.user_id != user.user_id).first()
            if clash is not None:
                raise ValidationError('That email is already in use')

        if password:
            user.set_password(password)
        if new_email:
            user.email = new_email
        if name and name.strip():
            profile.name = name.strip()

        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error("Error updating pupil %s: %s", profile_id, exc)
            raise

        current_app.logger.info("Updated pupil %s", profile_id)
        return profile

    @staticmethod
    def delete_pupil(profile_id: int) -> None:
        """Delete a pupil's role, assignments, profile and identity."""

        profile = db.session.get(Profile, profile_id)
        if profile is None:
            raise NotFoundError('Pupil not found', resource='pupil')

        role = _role_of(profile)
        if role is None:
            raise ValidationError('Could not verify user role')
        if role == UserRole.ROLE_ADMIN:
            raise AuthorizationError('Cannot delete admin users')

        try:
            ModuleAssignment.query.filter_by(user_id=profile.id).delete()
            db.session.delete(profile.user)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error("Error deleting pupil %s: %s", profile_id, exc)
            raise

        current_app.logger.info("Deleted pupil %s", profile_id)

    @staticmethod
    def set_assignment(profile_id: int, module_id: int, assigned: bool) -> bool:
        """Make the (pupil, module) assignment match ``assigned``.

        Assigning twice leaves a single row; unassigning a missing row is a
        no-op. Returns the resulting state.
        """
        PupilService.get_pupil(profile_id)
        if db.session.get(Module, module_id) is None:
            raise NotFoundError('Module not found', resource='module')

        existing = ModuleAssignment.query.filter_by(user_id=profile_id, module_id=module_id).first()
        try:
            if assigned and existing is None:
                db.session.add(ModuleAssignment(user_id=profile_id, module_id=module_id))
                db.session.commit()
            elif not assigned and existing is not None:
                db.session.delete(existing)
                db.session.commit()
        except IntegrityError:
            # Lost a race with another assign of the same pair; the row exists.
            db.session.rollback()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(
                "Error toggling module %s for pupil %s: %s", module_id, profile_id, exc
            )
            raise

        module_assignment_changed.send(None, user_id=profile_id, module_id=module_id, assigned=assigned)
        return assigned

    @staticmethod
    def toggle_assignment(profile_id: int, module_id: int) -> bool:
        """Flip the assignment and return the new state."""

        exists = ModuleAssignment.query.filter_by(user_id=profile_id, module_id=module_id).first() is not None
        return PupilService.set_assignment(profile_id, module_id, not exists)

    @staticmethod
    def create_test_users() -> list[dict[str, str]]:
        """Upsert the fixed admin and pupil test accounts."""

        created = []
        try:
            for account in TEST_ACCOUNTS:
                PupilService._upsert_account(
                    account['email'], account['password'], account['name'], account['role']
                )
                created.append({'email': account['email'], 'password': account['password'], 'role': account['role']})
            db.session.commit()
        except (ValidationError, SQLAlchemyError) as exc:
            db.session.rollback()
            current_app.logger.error("Error creating test users: %s", exc)
            raise

        current_app.logger.info("Test users created")
        return created
