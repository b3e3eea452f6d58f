"""
Journal API Package

JSON endpoints of the journal engine, organized by functional area.
Each module keeps its own blueprint, registered under the main api blueprint.
"""

from flask import Blueprint

# Create the main api blueprint
api_blueprint = Blueprint('api', __name__)

from . import (
    classes,
    lessons,
    assignments,
    grades,
    attendance,
    subgroups,
    averages,
    activity,
)

api_blueprint.register_blueprint(classes.bp, url_prefix='')
api_blueprint.register_blueprint(lessons.bp, url_prefix='')
api_blueprint.register_blueprint(assignments.bp, url_prefix='')
api_blueprint.register_blueprint(grades.bp, url_prefix='')
api_blueprint.register_blueprint(attendance.bp, url_prefix='')
api_blueprint.register_blueprint(subgroups.bp, url_prefix='')
api_blueprint.register_blueprint(averages.bp, url_prefix='')
api_blueprint.register_blueprint(activity.bp, url_prefix='')
