from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QColor

from ...database.repositories.credit_transactions_repo import CreditTransaction
from ...utils.helpers import fmt_money
from . import status as credit_status
from .balance import TAG_FREQUENT_BORROWER, TAG_GOOD_PAYER, TAG_OVERDUE, CustomerSummary
from .history import CREDIT, CreditHistoryEntry

TAG_LABELS = {
    TAG_OVERDUE: "Overdue",
    TAG_GOOD_PAYER: "Good payer",
    TAG_FREQUENT_BORROWER: "Frequent borrower",
}

# Custom role carrying the unformatted value behind a row (see RAW_ATTR)
RAW_ROLE = Qt.UserRole + 1
# Integer key ordering unpaid < partial < paid, for proxy sorting
SORT_ROLE = Qt.UserRole + 2


class _LedgerTableModel(QAbstractTableModel):
    """
    Read-only list-backed table. Subclasses set HEADERS, RAW_ATTR and
    implement `_display(row)` returning one value per header.
    """

    HEADERS: list[str] = []
    RAW_ATTR: str = ""
    MONEY_COLUMNS: frozenset = frozenset()

    def __init__(self, rows: list):
        super().__init__()
        self._rows = rows

    def _display(self, r) -> list:
        raise NotImplementedError

    def _extra(self, r, column: int, role):
        return None

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None

        r = self._rows[index.row()]

        if role in (Qt.DisplayRole, Qt.EditRole):
            return self._display(r)[index.column()]

        if role == Qt.TextAlignmentRole and index.column() in self.MONEY_COLUMNS:
            return Qt.AlignRight | Qt.AlignVCenter

        if role == RAW_ROLE:
            return getattr(r, self.RAW_ATTR)

        return self._extra(r, index.column(), role)

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()


class CustomersTableModel(_LedgerTableModel):
    """Customer list; RAW_ROLE gives the Decimal balance for numeric sorting."""

    HEADERS = ["ID", "Name", "Phone", "Balance", "Last Activity", "Tag"]
    RAW_ATTR = "outstanding_balance"
    MONEY_COLUMNS = frozenset({3})
    BALANCE_ROLE = RAW_ROLE

    def _display(self, r: CustomerSummary) -> list:
        return [
            r.customer_id,
            r.name,
            (r.phone or ""),
            fmt_money(r.outstanding_balance),
            (r.last_transaction_date or "")[:10],
            TAG_LABELS.get(r.tag, ""),
        ]


class CreditTransactionsTableModel(_LedgerTableModel):
    """Credits of one customer; RAW_ROLE gives 'unpaid' | 'partial' | 'paid'."""

    HEADERS = ["ID", "Date", "Item", "Qty", "Amount", "Paid", "Remaining", "Due", "Status"]
    RAW_ATTR = "status"
    MONEY_COLUMNS = frozenset({4, 5, 6})
    STATUS_ROLE = RAW_ROLE
    STATUS_COLUMN = 8

    def _display(self, r: CreditTransaction) -> list:
        return [
            r.credit_transaction_id,
            (r.date or "")[:10],
            r.description,
            ("" if r.quantity is None else r.quantity),
            fmt_money(r.amount),
            fmt_money(r.amount_paid),
            fmt_money(r.remaining),
            (r.due_date or ""),
            credit_status.label(r.status),
        ]

    def _extra(self, r: CreditTransaction, column: int, role):
        if column != self.STATUS_COLUMN:
            return None
        if role == Qt.ForegroundRole:
            return QColor(credit_status.style_tokens(r.status)["fg"])
        if role == Qt.BackgroundRole:
            return QColor(credit_status.style_tokens(r.status)["bg"])
        if role == SORT_ROLE:
            return credit_status.sort_key(r.status)
        return None


class CreditHistoryTableModel(_LedgerTableModel):
    """Timeline with running balance; payments display as negative amounts."""

    HEADERS = ["Date", "Type", "Description", "Amount", "Balance"]
    RAW_ATTR = "type"
    MONEY_COLUMNS = frozenset({3, 4})
    TYPE_ROLE = RAW_ROLE

    def _display(self, r: CreditHistoryEntry) -> list:
        is_credit = r.type == CREDIT
        return [
            r.date or "",
            "Credit" if is_credit else "Payment",
            r.description,
            fmt_money(r.amount if is_credit else -r.amount),
            fmt_money(r.running_balance),
        ]
