"""
Excel export functionality for SplitLedger
"""
from __future__ import annotations
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import AggregateAnalysis, Debt, GroupAnalysis
from computations import sorted_category_totals

# Excel forbids these in sheet titles
_BAD_TITLE_CHARS = set('[]:*?/\\')


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        if cell.value is None:
            continue
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _sheet_title(name: str, used: set) -> str:
    """Excel-safe, unique sheet title (max 31 chars)"""
    base = "".join("_" if ch in _BAD_TITLE_CHARS else ch for ch in name).strip() or "Group"
    base = base[:31]
    title = base
    n = 2
    while title.lower() in used:
        suffix = f" ({n})"
        title = base[:31 - len(suffix)] + suffix
        n += 1
    used.add(title.lower())
    return title


def _section(ws, title: str, headers: List[str]) -> None:
    ws.append([])
    ws.append([title])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    ws.cell(ws.max_row, 1).fill = PatternFill("solid", fgColor="D9E1F2")
    ws.append(headers)
    _style_header(ws, ws.max_row)


def _append_debts(ws, debts: List[Debt]) -> None:
    for d in debts:
        ws.append([d.counterparty_id, d.amount])
        ws.cell(ws.max_row, 2).number_format = "0.00"


def export_excel(
    analyses: List[GroupAnalysis],
    aggregate: AggregateAnalysis,
    filepath: str,
    observer_id: str = "",
) -> None:
    """
    Export an observer's reports to an Excel file with sheets:
    - Overview (cross-group totals and one row per group)
    - One sheet per group (summary, debts both ways, categories)
    - Categories (merged totals)
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)
    used = {"overview", "categories"}

    ws = wb.create_sheet("Overview")
    ws.append(["Observer", observer_id])
    ws.append(["Total balance", aggregate.total_balance])
    ws.append(["Owed to observer", aggregate.total_owed_to_observer])
    ws.append(["Owed by observer", aggregate.total_owed_by_observer])
    for r in range(2, 5):
        ws.cell(r, 2).number_format = "0.00"
    ws.cell(2, 1).font = Font(bold=True)

    _section(ws, "Groups", ["Group", "Balance", "Total spent", "Share", "Owed to me", "I owe"])
    for a in analyses:
        ws.append([
            a.group_name or a.group_id,
            a.observer_balance,
            a.total_spent,
            a.observer_share,
            sum(d.amount for d in a.owed_by_others),
            sum(d.amount for d in a.owed_to_others),
        ])
        for c in range(2, 7):
            ws.cell(ws.max_row, c).number_format = "0.00"
    _autosize_columns(ws)

    for a in analyses:
        ws = wb.create_sheet(_sheet_title(a.group_name or a.group_id, used))
        ws.append(["Group", a.group_name])
        ws.append(["Group id", a.group_id])
        ws.append(["Balance", a.observer_balance])
        ws.append(["Total spent", a.total_spent])
        ws.append(["Share", a.observer_share])
        for r in range(3, 6):
            ws.cell(r, 2).number_format = "0.00"

        _section(ws, "Owed to me", ["Member", "Amount"])
        _append_debts(ws, a.owed_by_others)
        _section(ws, "I owe", ["Member", "Amount"])
        _append_debts(ws, a.owed_to_others)

        _section(ws, "Categories", ["Category", "Total"])
        for cat, v in sorted_category_totals(a.category_totals):
            ws.append([cat, v])
            ws.cell(ws.max_row, 2).number_format = "0.00"
        _autosize_columns(ws)

    ws = wb.create_sheet("Categories")
    ws.append(["Category", "Total"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for cat, v in sorted_category_totals(aggregate.category_totals):
        ws.append([cat, v])
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 2).number_format = "0.00"
    _autosize_columns(ws)

    wb.save(filepath)
