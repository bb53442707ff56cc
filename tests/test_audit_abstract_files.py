"""
Tests for the abstract file audit script
"""
from scripts.audit_abstract_files import AbstractFileAuditor


def test_audit_reports_every_tier(session, test_settings, add_abstract, uploads, capsys):
    uploads.add("abstract_1", "stored.pdf")
    uploads.add("abstract_2", "found.pdf")
    uploads.add("abstract_2", "other.pdf")
    direct = add_abstract(file_name="stored.pdf", file_path="abstracts/abstract_1/stored.pdf")
    searched = add_abstract(file_name="found.pdf", file_path=None)

    auditor = AbstractFileAuditor(session, test_settings)
    exit_code = auditor.run()

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert lines[0].startswith(f"{direct.id}\tdirect_path\thigh\t")
    assert lines[1].startswith(f"{searched.id}\tnaming_convention\thigh\t")
    assert lines[1].endswith("found.pdf")
    assert auditor.stats["direct_path"] == 1
    assert auditor.stats["naming_convention"] == 1
    assert auditor.stats["missing"] == 0


def test_audit_only_problems(session, test_settings, add_abstract, uploads, capsys):
    # No lone files and no documents, so nothing can be guessed for abstract 2
    uploads.add("abstract_1", "stored.zip")
    uploads.add("abstract_1", "figure.png")
    add_abstract(file_name="stored.zip", file_path="abstracts/abstract_1/stored.zip")
    missing = add_abstract(file_name="gone.pdf", file_path="abstracts/abstract_9/gone.pdf")

    auditor = AbstractFileAuditor(session, test_settings, only_problems=True)
    exit_code = auditor.run()

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 1
    assert lines == [f"{missing.id}\tMISSING\t-\tabstracts/abstract_9/gone.pdf"]


def test_audit_selected_ids(session, test_settings, add_abstract, uploads, capsys):
    uploads.add("abstract_1", "one.pdf")
    uploads.add("abstract_2", "two.pdf")
    add_abstract(file_name="one.pdf", file_path="abstracts/abstract_1/one.pdf")
    second = add_abstract(file_name="two.pdf", file_path="abstracts/abstract_2/two.pdf")

    auditor = AbstractFileAuditor(session, test_settings)
    auditor.run([second.id])

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    assert lines[0].startswith(f"{second.id}\t")
