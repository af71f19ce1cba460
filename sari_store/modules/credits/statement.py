# sari_store/modules/credits/statement.py
from __future__ import annotations

from datetime import date
from importlib import resources as importlib_resources
import logging
import os
from pathlib import Path
import sqlite3
from typing import Optional

from jinja2 import Template

from ...constants import APP_NAME
from ...database.repositories.errors import NotFoundError
from ...database.repositories.ledger_repo import LedgerRepo
from ...utils.helpers import fmt_money, local_today
from .history import CREDIT, CreditHistoryService

_log = logging.getLogger(__name__)

TEMPLATE_PACKAGE = "sari_store.resources.templates"
TEMPLATE_NAME = "credit_statement.html"


def _load_template() -> Template:
    tpl_str = importlib_resources.files(TEMPLATE_PACKAGE).joinpath(TEMPLATE_NAME).read_text(encoding="utf-8")
    return Template(tpl_str, autoescape=True)


def render_statement_html(
    conn: sqlite3.Connection,
    customer_id: int,
    today: Optional[date] = None,
    *,
    store_name: str = APP_NAME,
) -> str:
    """
    Printable credit statement: customer header, the running-balance
    timeline (oldest first) and the amount still owed.
    """
    day = today if today is not None else local_today()
    summary = LedgerRepo(conn).summary(customer_id, day)
    if summary is None:
        raise NotFoundError(f"Customer #{customer_id} does not exist.")

    rows = []
    for e in CreditHistoryService(conn).entries(customer_id):
        is_credit = e.type == CREDIT
        rows.append(
            {
                "type": e.type,
                "type_label": "Credit" if is_credit else "Payment",
                "date": (e.date or "")[:10],
                "description": e.description,
                "amount": fmt_money(e.amount if is_credit else -e.amount),
                "balance": fmt_money(e.running_balance),
            }
        )

    owed = summary.outstanding_balance
    return _load_template().render(
        store_name=store_name,
        as_of=day.isoformat(),
        customer=summary,
        rows=rows,
        total_label="Balance due" if owed > 0 else "No balance (account settled)",
        total_amount=fmt_money(owed),
        days_overdue=summary.days_overdue,
    )


def export_statement_pdf(
    conn: sqlite3.Connection,
    customer_id: int,
    file_path: str | os.PathLike,
    today: Optional[date] = None,
) -> Path:
    """Render the statement and write it as a PDF. Returns the written path."""
    # weasyprint pulls in pango/cairo; load it only when a PDF is requested
    from weasyprint import HTML

    html = render_statement_html(conn, customer_id, today)
    target = Path(file_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        HTML(string=html).write_pdf(str(target))
    except Exception as e:
        _log.error("Failed to render credit statement PDF to %s: %s", target, e, exc_info=True)
        raise
    _log.info("credit statement for customer #%s written to %s", customer_id, target)
    return target
