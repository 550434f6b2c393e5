"""
Tests for the document validators run before store writes.
"""

from wardwatch.services.validation import validate_problem, validate_ward


def _problem(**overrides):
    doc = {
        "title": "Pothole on Station Road",
        "description": "Deep pothole in the middle of the lane.",
        "category": "Roads & Transportation",
        "location": "Station Road",
        "priority": "Medium",
        "status": "Open",
        "reported_by": "user-1",
        "ward_number": 4,
        "images": [],
    }
    doc.update(overrides)
    return doc


def _fields(errors):
    return {error["field"] for error in errors}


class TestValidateProblem:

    def test_valid_problem_has_no_errors(self):
        assert validate_problem(_problem()) == []

    def test_reports_every_violation_not_just_first(self):
        errors = validate_problem(_problem(
            title="abc",
            description="short",
            category="Potholes",
            priority="Urgent",
            ward_number=51,
        ))

        assert _fields(errors) == {"title", "description", "category", "priority", "wardNumber"}

    def test_admin_notes_limit(self):
        assert validate_problem(_problem(admin_notes="x" * 500)) == []
        assert _fields(validate_problem(_problem(admin_notes="x" * 501))) == {"adminNotes"}

    def test_status_must_be_known(self):
        assert _fields(validate_problem(_problem(status="Reopened"))) == {"status"}

    def test_missing_reporter(self):
        assert _fields(validate_problem(_problem(reported_by=None))) == {"reportedBy"}

    def test_images_must_be_strings(self):
        assert _fields(validate_problem(_problem(images=["ok", 3]))) == {"images"}

    def test_title_length_ignores_surrounding_whitespace(self):
        assert _fields(validate_problem(_problem(title="   abc   "))) == {"title"}


class TestValidateWard:

    def test_valid_ward(self):
        assert validate_ward({"ward_number": 12, "name": "Ward 12", "population": 0}) == []

    def test_all_violations_reported(self):
        errors = validate_ward({
            "ward_number": 0,
            "name": "W",
            "description": "d" * 501,
            "population": -5,
        })

        assert _fields(errors) == {"wardNumber", "name", "description", "population"}

    def test_bool_is_not_a_ward_number(self):
        assert _fields(validate_ward({"ward_number": True, "name": "Ward"})) == {"wardNumber"}
