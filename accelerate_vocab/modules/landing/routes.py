# File: accelerate_vocab/modules/landing/routes.py
# Purpose: Public landing page.

from flask import render_template

from . import landing_bp


@landing_bp.route('/')
def index():
    return render_template('landing/index.html')
