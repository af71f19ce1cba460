# tests/test_statement.py
import pytest

from sari_store.database.repositories import NotFoundError
from sari_store.modules.credits.statement import export_statement_pdf, render_statement_html


def test_statement_html_lists_timeline_and_balance(conn, today, nena, make_credit, make_payment):
    make_credit(nena, "500", "2025-03-01", product_name="Bigas <5kg>", due_date="2025-03-10")
    make_payment(nena, "120", "2025-03-03")

    html = render_statement_html(conn, nena, today, store_name="Tindahan ni Nena")

    assert "Tindahan ni Nena" in html
    assert "Aling Nena" in html and "0917-555-0101" in html
    assert "Bigas &lt;5kg&gt;" in html          # autoescaped
    assert "-₱120.00" in html
    assert "Balance due: ₱380.00" in html
    assert "Overdue by 5 days" in html


def test_settled_account_statement(conn, today, nena, make_credit, make_payment):
    make_credit(nena, "50", "2025-03-01")
    make_payment(nena, "50", "2025-03-02")
    html = render_statement_html(conn, nena, today)
    assert "No balance (account settled): ₱0.00" in html
    assert "Overdue" not in html


def test_statement_for_unknown_customer(conn):
    with pytest.raises(NotFoundError):
        render_statement_html(conn, 999)


def test_statement_pdf(conn, tmp_path, today, nena, make_credit):
    try:
        import weasyprint  # noqa: F401
    except (ImportError, OSError):
        pytest.skip("weasyprint (or its pango/cairo libraries) not available")
    make_credit(nena, "75", "2025-03-01")
    out = export_statement_pdf(conn, nena, tmp_path / "out" / "nena.pdf", today)
    assert out.read_bytes()[:4] == b"%PDF"
