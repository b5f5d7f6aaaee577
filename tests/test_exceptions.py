from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError
from rest_framework.exceptions import NotFound

from authentication.exceptions import custom_exception_handler
from orders.exceptions import InvalidTransition


def test_api_exception_keeps_its_message():
    resp = custom_exception_handler(NotFound("Table 3 introuvable"), {})

    assert resp.status_code == 404
    assert resp.data == {
        "error": "Table 3 introuvable",
        "details": {"detail": "Table 3 introuvable"},
        "status_code": 404,
    }


def test_invalid_transition_is_a_conflict():
    resp = custom_exception_handler(InvalidTransition(), {})

    assert resp.status_code == 409
    assert resp.data["error"] == "Transition de statut invalide"


def test_django_validation_error_is_a_bad_request():
    resp = custom_exception_handler(DjangoValidationError("Prix invalide"), {})

    assert resp.status_code == 400
    assert resp.data["details"] == {"non_field_errors": ["Prix invalide"]}


def test_integrity_error_is_a_bad_request():
    resp = custom_exception_handler(IntegrityError("UNIQUE constraint failed"), {})

    assert resp.status_code == 400


def test_storage_error_is_logged(caplog):
    with caplog.at_level("ERROR", logger="authentication.exceptions"):
        resp = custom_exception_handler(DatabaseError("database is locked"), {})

    assert resp.status_code == 500
    assert resp.data["error"] == "Storage error"
    assert "database is locked" in caplog.text
