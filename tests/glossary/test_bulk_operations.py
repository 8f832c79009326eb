"""批量审核：按批次执行，首个失败批次终止且不回滚已提交的批次；存在重复时整体拦截。"""

from sqlalchemy.exc import OperationalError

from app.packages.glossary.core.config import get_settings
from app.packages.glossary.core.constants import (
    HTTP_STATUS_CONFLICT,
    MSG_NOTHING_SELECTED,
    MSG_NOTHING_TO_APPROVE,
    MSG_NOTHING_TO_DELETE,
    MSG_NOTHING_TO_REJECT,
    MSG_ONLY_DUPLICATES_PENDING,
)
from app.packages.glossary.crud.terms import term_crud
from app.packages.glossary.models.term import GlossaryTerm
from app.packages.glossary.services.term_service import term_service


def _spy(monkeypatch, name):
    original = getattr(term_crud, name)
    batches = []

    def wrapper(db, ids, *args, **kwargs):
        batches.append(list(ids))
        return original(db, ids, *args, **kwargs)

    monkeypatch.setattr(term_crud, name, wrapper)
    return batches


def test_approve_all_on_empty_pending_set_fails(db_session_fixture, seed_term):
    seed_term("Already Approved")

    result = term_service.approve_all(db_session_fixture)

    assert result.success is False
    assert result.message == MSG_NOTHING_TO_APPROVE
    assert result.affected == 0


def test_approve_all_runs_in_configured_batches(db_session_fixture, seed_term, monkeypatch):
    for index in range(5):
        seed_term(f"Pending {index}", f"대기 {index}", status="pending")
    seed_term("Approved", "승인")
    monkeypatch.setattr(get_settings(), "approve_batch_size", 2)
    batches = _spy(monkeypatch, "update_status_by_ids")

    result = term_service.approve_all(db_session_fixture)

    assert result.success is True
    assert result.affected == 5
    assert [len(batch) for batch in batches] == [2, 2, 1]
    assert term_crud.count_by_status(db_session_fixture) == {"pending": 0, "approved": 6}


def test_reject_all_deletes_only_pending(db_session_fixture, seed_term, monkeypatch):
    for index in range(3):
        seed_term(f"Pending {index}", f"대기 {index}", status="pending")
    keep = seed_term("Approved", "승인")
    monkeypatch.setattr(get_settings(), "delete_batch_size", 2)
    batches = _spy(monkeypatch, "delete_by_ids")

    result = term_service.reject_all(db_session_fixture)

    assert result.success is True
    assert result.affected == 3
    assert [len(batch) for batch in batches] == [2, 1]
    assert term_crud.all_ids(db_session_fixture) == [keep.id]


def test_reject_all_without_pending_fails(db_session_fixture):
    result = term_service.reject_all(db_session_fixture)
    assert (result.success, result.message, result.affected) == (False, MSG_NOTHING_TO_REJECT, 0)


def _seed_with_duplicate(seed_term):
    seed_term("Pump", "펌프", discipline="Piping")
    duplicate = seed_term("pump", "펌프", discipline="Piping", status="pending")
    fresh = seed_term("Valve", "밸브", discipline="Piping", status="pending")
    return duplicate, fresh


def test_approve_all_is_blocked_by_duplicates(db_session_fixture, seed_term):
    _seed_with_duplicate(seed_term)
    counts_before = term_crud.count_by_status(db_session_fixture)

    result = term_service.approve_all(db_session_fixture)

    assert result.success is False
    assert result.code == HTTP_STATUS_CONFLICT
    assert result.data == {"duplicate_count": 1}
    assert term_crud.count_by_status(db_session_fixture) == counts_before


def test_reject_all_is_blocked_by_duplicates(db_session_fixture, seed_term):
    _seed_with_duplicate(seed_term)

    result = term_service.reject_all(db_session_fixture)

    assert (result.success, result.code, result.affected) == (False, HTTP_STATUS_CONFLICT, 0)
    assert len(term_crud.all_ids(db_session_fixture)) == 3


def test_approve_all_excluding_duplicates_skips_them(db_session_fixture, seed_term, monkeypatch):
    duplicate, fresh = _seed_with_duplicate(seed_term)
    batches = _spy(monkeypatch, "update_status_by_ids")

    result = term_service.approve_all(db_session_fixture, exclude_duplicates=True)

    assert result.success is True
    assert result.affected == 1
    assert result.data == {"skipped": 1}
    assert batches == [[fresh.id]]
    assert term_crud.ids_by_status(db_session_fixture, "pending") == [duplicate.id]


def test_approve_all_excluding_duplicates_with_only_duplicates_fails(db_session_fixture, seed_term):
    seed_term("Pump", "펌프")
    seed_term("PUMP", "양수기", status="pending")

    result = term_service.approve_all(db_session_fixture, exclude_duplicates=True)

    assert (result.success, result.message, result.affected) == (False, MSG_ONLY_DUPLICATES_PENDING, 0)
    assert result.data == {"skipped": 1}


def test_first_failing_batch_aborts_without_rolling_back_earlier_batches(
    db_session_fixture, seed_term, monkeypatch
):
    ids = [seed_term(f"Term {index}").id for index in range(5)]
    monkeypatch.setattr(get_settings(), "delete_batch_size", 2)
    original = term_crud.delete_by_ids
    calls = []

    def flaky_delete(db, batch, **kwargs):
        calls.append(list(batch))
        if len(calls) == 2:
            raise OperationalError("DELETE", {}, Exception("store unavailable"))
        return original(db, batch, **kwargs)

    monkeypatch.setattr(term_crud, "delete_by_ids", flaky_delete)

    result = term_service.delete_multiple(db_session_fixture, ids)

    assert result.success is False
    assert result.affected == 2
    assert len(calls) == 2
    remaining = set(term_crud.all_ids(db_session_fixture))
    assert remaining == set(ids[2:])


def test_delete_multiple_requires_a_selection(db_session_fixture):
    result = term_service.delete_multiple(db_session_fixture, [])
    assert (result.success, result.message) == (False, MSG_NOTHING_SELECTED)


def test_delete_multiple_ignores_repeated_ids(db_session_fixture, seed_term):
    term = seed_term("Once")

    result = term_service.delete_multiple(db_session_fixture, [term.id, term.id])

    assert result.success is True
    assert result.affected == 1


def test_delete_all_covers_every_status(db_session_fixture, seed_term):
    seed_term("Approved")
    seed_term("Pending", status="pending")

    result = term_service.delete_all(db_session_fixture)

    assert result.affected == 2
    assert db_session_fixture.query(GlossaryTerm).count() == 0
    assert term_service.delete_all(db_session_fixture).message == MSG_NOTHING_TO_DELETE
