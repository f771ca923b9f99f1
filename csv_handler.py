"""
CSV export and import functionality for SplitLedger
"""
from __future__ import annotations
import csv
from typing import List

from models import Expense, Payment

EXPENSE_COLUMNS = ['id', 'date', 'payer', 'category', 'description', 'value', 'group']
PAYMENT_COLUMNS = ['id', 'date', 'payer', 'target', 'value', 'group']


def export_expenses_to_csv(expenses: List[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    CSV columns: id, date, payer, category, description, value, group
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(EXPENSE_COLUMNS)
        for e in expenses:
            writer.writerow([e.id, e.date, e.payer_id, e.category, e.description, e.value, e.group_id])


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Returns list of Expense objects
    """
    expenses = []
    with open(filepath, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            expenses.append(Expense(
                id=row['id'],
                payer_id=row['payer'],
                value=float(row['value']),
                category=row.get('category') or '',
                group_id=row.get('group') or '',
                description=row.get('description') or '',
                date=row.get('date') or '',
            ))
    return expenses


def export_payments_to_csv(payments: List[Payment], filepath: str) -> None:
    """
    Export payments list to CSV file
    CSV columns: id, date, payer, target, value, group
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(PAYMENT_COLUMNS)
        for p in payments:
            writer.writerow([p.id, p.date, p.payer_id, p.target_id, p.value, p.group_id])


def import_payments_from_csv(filepath: str) -> List[Payment]:
    """Import payments list from CSV file"""
    payments = []
    with open(filepath, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            payments.append(Payment(
                id=row['id'],
                payer_id=row['payer'],
                target_id=row['target'],
                value=float(row['value']),
                group_id=row.get('group') or '',
                date=row.get('date') or '',
            ))
    return payments
