"""Tests for the rename transaction."""

import json

import pytest

from zet.audit_log import read_audit_log
from zet.commands.rename import compute_rename_plan, execute_rename_plan, is_descendant, run_rename
from zet.errors import AlreadyExists, InvalidIdentifierShape, NotFound, PartialRename
from zet.planning import BasePlan


def _read(corpus, identifier: str) -> str:
    return corpus.read(identifier)


def test_is_descendant():
    assert is_descendant("tmp.3a1", "tmp.3")
    assert is_descendant("tmp.3a1b2", "tmp.3")
    assert not is_descendant("tmp.30", "tmp.3")
    assert not is_descendant("tmp.3", "tmp.3")
    assert not is_descendant("tmp.4a1", "tmp.3")


def test_rename_subtree_and_links(corpus, make_zettel):
    make_zettel("tmp.3", "see [[tmp.3a1]]")
    make_zettel("tmp.3a1", "parent [[tmp.3]]")

    plan = compute_rename_plan(corpus, "tmp.3", "proj.7")
    result = execute_rename_plan(corpus, plan)

    assert result.completed == [("tmp.3", "proj.7"), ("tmp.3a1", "proj.7a1")]
    assert not corpus.exists("tmp.3")
    assert not corpus.exists("tmp.3a1")

    root = _read(corpus, "proj.7")
    assert "zettel: proj.7\n" in root
    assert "see [[proj.7a1]]" in root
    assert "[[tmp.3a1]]" not in root

    child = _read(corpus, "proj.7a1")
    assert "zettel: proj.7a1\n" in child
    assert "parent [[proj.7]]" in child


def test_rename_rewrites_branch_links_everywhere(corpus, make_zettel):
    make_zettel("tmp.3", "branches:\n[[tmp.3a]]\n[[tmp.3b]]")
    make_zettel("tmp.3a1")
    make_zettel("tmp.3b1")
    make_zettel("tmp.9", "elsewhere [[tmp.3b]] and [[tmp.30]]")
    make_zettel("tmp.30", "sibling, not a child")

    execute_rename_plan(corpus, compute_rename_plan(corpus, "tmp.3", "proj.7"))

    assert "[[proj.7a]]\n[[proj.7b]]" in _read(corpus, "proj.7")
    assert "elsewhere [[proj.7b]] and [[tmp.30]]" in _read(corpus, "tmp.9")
    assert corpus.exists("tmp.30")
    assert corpus.exists("proj.7a1")
    assert corpus.exists("proj.7b1")


def test_rename_nested_descendants(corpus, make_zettel):
    make_zettel("tmp.3", "[[tmp.3a]]")
    make_zettel("tmp.3a1", "[[tmp.3a1b]]")
    make_zettel("tmp.3a1b1", "up [[tmp.3a1]]")

    execute_rename_plan(corpus, compute_rename_plan(corpus, "tmp.3", "proj.7"))

    assert sorted(corpus.list_identifiers()) == ["proj.7", "proj.7a1", "proj.7a1b1"]
    assert "[[proj.7a1b]]" in _read(corpus, "proj.7a1")
    assert "up [[proj.7a1]]" in _read(corpus, "proj.7a1b1")


def test_rename_leaves_unrelated_text_alone(corpus, make_zettel):
    make_zettel("tmp.3", "plain mention of tmp.3 and [[tmp.31]]")
    make_zettel("tmp.31")

    execute_rename_plan(corpus, compute_rename_plan(corpus, "tmp.3", "proj.7"))

    assert "plain mention of tmp.3 and [[tmp.31]]" in _read(corpus, "proj.7")
    assert corpus.exists("tmp.31")


def test_rename_synthesizes_missing_header(corpus, zettel_dir):
    (zettel_dir / "tmp.3.md").write_text("no header here\n", encoding="utf-8")

    execute_rename_plan(corpus, compute_rename_plan(corpus, "tmp.3", "proj.7"))

    assert _read(corpus, "proj.7") == "---\nzettel: proj.7\n---\nno header here\n"


def test_rename_rejects_branch_target(corpus, make_zettel):
    make_zettel("tmp.3")
    with pytest.raises(InvalidIdentifierShape):
        compute_rename_plan(corpus, "tmp.3", "proj.7a")


def test_rename_rejects_existing_target(corpus, make_zettel):
    make_zettel("tmp.3")
    make_zettel("proj.7")
    with pytest.raises(AlreadyExists):
        compute_rename_plan(corpus, "tmp.3", "proj.7")


def test_rename_missing_source(corpus):
    with pytest.raises(NotFound):
        compute_rename_plan(corpus, "tmp.3", "proj.7")


def test_rename_rejects_branch_source(corpus, make_zettel):
    # foo1 would otherwise become bar.71, sequence 71 of bar. instead of a child of bar.7
    make_zettel("foo")
    make_zettel("foo1")
    with pytest.raises(InvalidIdentifierShape):
        compute_rename_plan(corpus, "foo", "bar.7")
    assert sorted(corpus.list_identifiers()) == ["foo", "foo1"]


@pytest.mark.parametrize("from_id, to_id", [("../x1", "proj.7"), ("tmp.3", "../x1")])
def test_rename_rejects_paths_outside_corpus(corpus, make_zettel, from_id, to_id):
    make_zettel("tmp.3")
    with pytest.raises(InvalidIdentifierShape):
        compute_rename_plan(corpus, from_id, to_id)


def test_rename_survives_undecodable_unit(corpus, make_zettel, zettel_dir):
    make_zettel("tmp.3", "[[tmp.3a]]")
    make_zettel("tmp.3a1")
    raw = b"---\nzettel: tmp.9\n---\ncaf\xe9 [[tmp.3]]\n"
    (zettel_dir / "tmp.9.md").write_bytes(raw)

    result = execute_rename_plan(corpus, compute_rename_plan(corpus, "tmp.3", "proj.7"))

    assert result.completed == [("tmp.3", "proj.7"), ("tmp.3a1", "proj.7a1")]
    # the link is rewritten and the rest of the bytes are untouched
    assert (zettel_dir / "tmp.9.md").read_bytes() == raw.replace(b"[[tmp.3]]", b"[[proj.7]]")


def test_unexpected_error_after_first_move_is_partial(corpus, make_zettel, monkeypatch):
    make_zettel("tmp.3")
    make_zettel("tmp.3a1")
    plan = compute_rename_plan(corpus, "tmp.3", "proj.7")

    original_read = corpus.read

    def failing_read(identifier):
        if identifier == "tmp.3a1":
            raise UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")
        return original_read(identifier)

    monkeypatch.setattr(corpus, "read", failing_read)

    with pytest.raises(PartialRename) as exc:
        execute_rename_plan(corpus, plan)

    assert exc.value.completed == [("tmp.3", "proj.7")]
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)


def test_plan_has_no_side_effects(corpus, make_zettel):
    make_zettel("tmp.3", "[[tmp.3a]]")
    make_zettel("tmp.3a1")

    plan = compute_rename_plan(corpus, "tmp.3", "proj.7")

    assert plan.renames == [("tmp.3", "proj.7"), ("tmp.3a1", "proj.7a1")]
    assert [op.kind for op in plan.operations[:4]] == [
        "move",
        "set-header",
        "rewrite-links",
        "rewrite-branch-links",
    ]
    assert plan.operations[-1].scope == "corpus"
    assert "move tmp.3.md -> proj.7.md" in plan.summary()
    assert sorted(corpus.list_identifiers()) == ["tmp.3", "tmp.3a1"]


def test_partial_failure_reports_completed_renames(corpus, make_zettel):
    make_zettel("tmp.3", "[[tmp.3a1]]")
    make_zettel("tmp.3a1")
    make_zettel("tmp.3b1")

    plan = compute_rename_plan(corpus, "tmp.3", "proj.7")
    # collision discovered only while renaming descendants
    make_zettel("proj.7b1", "in the way")

    with pytest.raises(PartialRename) as exc:
        execute_rename_plan(corpus, plan)

    assert exc.value.completed == [("tmp.3", "proj.7"), ("tmp.3a1", "proj.7a1")]
    assert isinstance(exc.value.__cause__, AlreadyExists)
    # nothing is rolled back
    assert corpus.exists("proj.7")
    assert corpus.exists("proj.7a1")
    assert corpus.exists("tmp.3b1")
    assert "in the way" in _read(corpus, "proj.7b1")


def test_first_move_failure_is_not_partial(corpus, make_zettel):
    make_zettel("tmp.3")
    plan = compute_rename_plan(corpus, "tmp.3", "proj.7")
    make_zettel("proj.7")

    with pytest.raises(AlreadyExists):
        execute_rename_plan(corpus, plan)


def test_run_rename_dry_run(config, corpus, make_zettel, capsys):
    make_zettel("tmp.3")

    assert run_rename(config, "tmp.3", "proj.7", dry_run=True) == 0

    assert corpus.exists("tmp.3")
    assert not corpus.exists("proj.7")
    assert "move tmp.3.md -> proj.7.md" in capsys.readouterr().err
    assert read_audit_log(config.state_dir) == []


def test_run_rename_logs_to_audit(config, corpus, make_zettel, capsys):
    make_zettel("tmp.3", "[[tmp.3a]]")
    make_zettel("tmp.3a1")

    assert run_rename(config, "tmp.3", "proj.7") == 0
    assert capsys.readouterr().out.strip() == "proj.7"

    entries = read_audit_log(config.state_dir)
    assert len(entries) == 1
    assert entries[0].operation == "rename"
    assert entries[0].changes.moved == ["tmp.3 -> proj.7", "tmp.3a1 -> proj.7a1"]
    assert entries[0].metadata == {"from": "tmp.3", "to": "proj.7"}

    raw = (config.state_dir / "audit.log").read_text(encoding="utf-8")
    assert json.loads(raw.splitlines()[0])["operation"] == "rename"


def test_audit_dir_is_not_a_zettel(config, corpus, make_zettel):
    make_zettel("tmp.3")
    run_rename(config, "tmp.3", "proj.7")
    assert corpus.list_identifiers() == ["proj.7"]


def test_base_plan_requires_summary(zettel_dir):
    with pytest.raises(TypeError):
        BasePlan(zettel_dir=zettel_dir)
