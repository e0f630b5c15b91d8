from datetime import date
from unittest import TestCase

import stats
from models import (
    STATUS_DUE,
    STATUS_OVERDUE,
    STATUS_PAID,
    Contribution,
    Database,
    Expense,
    Member,
    Notice,
    OtherIncome,
    Puja,
)


def sample_db():
    return Database(
        members=[
            Member(id="m1", name="Ratan Das", designation="সভাপতি", phone="01711"),
            Member(id="m2", name="Mita Saha", designation="সদস্য", phone="01822"),
        ],
        pujas=[
            Puja(id="p1", name="Durga", date="2024-10-10", budget=5000.0),
            Puja(id="p2", name="Kali", date="2024-11-01", budget=2000.0),
            Puja(id="p0", name="Saraswati", date="2024-02-14", budget=1000.0),
        ],
        contributions=[
            Contribution(id="c1", member_id="m1", puja_id="p1", amount=500.0, paid_amount=500.0, status=STATUS_PAID),
            Contribution(id="c2", member_id="m2", puja_id="p1", amount=500.0, paid_amount=100.0, status=STATUS_DUE),
            Contribution(id="c3", member_id="m1", puja_id="p2", amount=300.0, paid_amount=0.0, status=STATUS_OVERDUE),
            Contribution(id="c4", member_id="gone", puja_id="p2", amount=99.0, paid_amount=0.0),
        ],
        income=[
            OtherIncome(id="i1", source="Donor", amount=1000.0, date="2024-10-01"),
            OtherIncome(id="i2", source="Sponsor", amount=2000.0, date="2024-10-05"),
        ],
        expenses=[
            Expense(id="e1", description="Idol", amount=1500.0, date="2024-10-03", puja_id="p1"),
            Expense(id="e2", description="Tea", amount=50.0, date="2024-10-07"),
            Expense(id="e3", description="Lights", amount=700.0, date="2024-09-20", puja_id="p1"),
        ],
        notices=[
            Notice(id="n1", title="Old", date="2024-01-01", is_important=True),
            Notice(id="n2", title="Plain", date="2024-10-01"),
            Notice(id="n3", title="New", date="2024-10-02", is_important=True),
        ],
    )


class DashboardTest(TestCase):
    def test_totals(self):
        s = stats.dashboard_stats(sample_db())
        self.assertEqual(s.total_members, 2)
        self.assertEqual(s.total_income, 3000.0)
        self.assertEqual(s.total_expenses, 2250.0)
        self.assertEqual(s.total_contributions_expected, 1399.0)
        self.assertEqual(s.total_contributions_received, 600.0)
        self.assertEqual(s.total_contributions_pending, 799.0)
        self.assertEqual(s.balance, 3000.0 + 600.0 - 2250.0)

    def test_empty_database(self):
        s = stats.dashboard_stats(Database())
        self.assertEqual(s.total_members, 0)
        self.assertEqual(s.balance, 0)

    def test_upcoming_pujas(self):
        db = sample_db()
        upcoming = stats.upcoming_pujas(db.pujas, today=date(2024, 10, 1))
        self.assertEqual([p.id for p in upcoming], ["p1", "p2"])
        on_the_day = stats.upcoming_pujas(db.pujas, today=date(2024, 10, 10))
        self.assertEqual([p.id for p in on_the_day], ["p2"])
        self.assertEqual(stats.upcoming_pujas(db.pujas, today=date(2025, 1, 1)), [])

    def test_upcoming_pujas_limit(self):
        pujas = [Puja(id=str(i), name=str(i), date=f"2030-01-{i + 1:02d}") for i in range(8)]
        upcoming = stats.upcoming_pujas(list(reversed(pujas)), today=date(2024, 1, 1))
        self.assertEqual([p.id for p in upcoming], ["0", "1", "2", "3", "4"])

    def test_important_notices_newest_first(self):
        self.assertEqual([n.id for n in stats.important_notices(sample_db().notices)], ["n3", "n1"])

    def test_recent_transactions(self):
        db = sample_db()
        recent = stats.recent_transactions(db.income, db.expenses)
        self.assertEqual([t.date for t in recent], ["2024-10-07", "2024-10-05", "2024-10-03", "2024-10-01", "2024-09-20"])
        self.assertEqual(recent[0].kind, "expense")
        self.assertEqual(recent[1].kind, "income")


class FilterTest(TestCase):
    def test_member_search_is_case_insensitive(self):
        members = sample_db().members
        self.assertEqual([m.id for m in stats.filter_members(members, "ratan")], ["m1"])
        self.assertEqual([m.id for m in stats.filter_members(members, "সদস্য")], ["m2"])
        self.assertEqual([m.id for m in stats.filter_members(members, "018")], ["m2"])
        self.assertEqual(len(stats.filter_members(members, "  ")), 2)

    def test_expenses_by_puja_keep_their_order(self):
        expenses = sample_db().expenses
        by_date = stats.sort_by_date_desc(expenses)
        self.assertEqual([e.id for e in by_date], ["e2", "e1", "e3"])
        self.assertEqual([e.id for e in stats.filter_expenses(expenses, "p1")], ["e1", "e3"])
        self.assertEqual(len(stats.filter_expenses(expenses, "")), 3)

    def test_contribution_filters(self):
        rows = sample_db().contributions
        self.assertEqual([c.id for c in stats.filter_contributions(rows, puja_id="p1")], ["c1", "c2"])
        self.assertEqual([c.id for c in stats.filter_contributions(rows, member_id="m1")], ["c1", "c3"])
        self.assertEqual(
            [c.id for c in stats.filter_contributions(rows, member_id="m1", status=STATUS_OVERDUE)], ["c3"]
        )

    def test_pending_contributions(self):
        self.assertEqual([c.id for c in stats.pending_contributions(sample_db().contributions)], ["c2", "c3", "c4"])


class SummaryTest(TestCase):
    def test_contribution_summary_per_member(self):
        db = sample_db()
        summary = stats.contribution_summary(db.members, db.contributions)
        self.assertEqual([s.member_id for s in summary], ["m1", "m2"])
        m1 = summary[0]
        self.assertEqual((m1.total_expected, m1.total_paid, m1.total_pending), (800.0, 500.0, 300.0))

    def test_puja_expense_summary(self):
        db = sample_db()
        by_puja = {s.puja_id: s.total_expenses for s in stats.puja_expense_summary(db.pujas, db.expenses)}
        self.assertEqual(by_puja, {"p1": 2200.0, "p2": 0, "p0": 0})

    def test_records_frame(self):
        df = stats.records_frame(sample_db().members, ["name", "phone"])
        self.assertEqual(list(df.columns), ["name", "phone"])
        self.assertEqual(len(df), 2)
        self.assertTrue(stats.records_frame([], ["name"]).empty)
