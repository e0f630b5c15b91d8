"""
models.py
Domain records (dataclasses), enum labels and the JSON shape of the data file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace

# Labels are stored verbatim in the data file, so they stay in Bengali.
DESIGNATIONS = ("সভাপতি", "সম্পাদক", "কোষাধ্যক্ষ", "সদস্য")

PUJA_TYPES = ("শ্যামা পূজা", "স্বরসতী পূজা", "দূর্গা পূজা", "অন্যান্য")

STATUS_PAID = "পরিশোধিত"
STATUS_DUE = "বকেয়া"
STATUS_OVERDUE = "অতিরিক্ত বকেয়া"
PAYMENT_STATUSES = (STATUS_PAID, STATUS_DUE, STATUS_OVERDUE)

PAYMENT_METHODS = ("নগদ", "অনলাইন", "চেক")

INCOME_TYPES = ("দান", "স্পনসরশিপ", "সরকারি অনুদান", "অন্যান্য")

EXPENSE_CATEGORIES = (
    "প্রতিমা",
    "মণ্ডপ",
    "পুজো সামগ্রী",
    "খাবার",
    "আলোকসজ্জা",
    "বাজনা",
    "অন্যান্য",
)

ROLE_ADMIN = "admin"
ROLE_VIEWER = "viewer"
ROLES = (ROLE_ADMIN, ROLE_VIEWER)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


class Record:
    """
    Mixin for the flat records of the data file.
    Attribute names are snake_case, file keys are camelCase
    (member_id <-> memberId). Optional fields holding None are not written.
    """

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.default is None:
                continue
            out[_camel(f.name)] = value
        return out

    @classmethod
    def from_dict(cls, raw: dict):
        kwargs = {}
        for f in fields(cls):
            key = _camel(f.name)
            if key in raw:
                kwargs[f.name] = raw[key]
        return cls(**kwargs)


@dataclass(frozen=True)
class Member(Record):
    id: str
    name: str
    designation: str = ""
    phone: str = ""
    address: str = ""
    created_at: str = ""
    photo: str | None = None  # data URI


@dataclass(frozen=True)
class Puja(Record):
    id: str
    name: str
    type: str = PUJA_TYPES[-1]
    budget: float = 0.0
    date: str = ""
    description: str = ""
    created_at: str = ""


@dataclass(frozen=True)
class Contribution(Record):
    id: str
    member_id: str
    puja_id: str
    amount: float = 0.0
    paid_amount: float = 0.0
    status: str = STATUS_DUE
    created_at: str = ""
    payment_method: str | None = None
    payment_date: str | None = None
    notes: str | None = None

    @property
    def pending(self) -> float:
        return self.amount - self.paid_amount


@dataclass(frozen=True)
class OtherIncome(Record):
    id: str
    type: str = INCOME_TYPES[0]
    source: str = ""
    description: str = ""
    amount: float = 0.0
    date: str = ""
    created_at: str = ""


@dataclass(frozen=True)
class Expense(Record):
    id: str
    category: str = EXPENSE_CATEGORIES[-1]
    description: str = ""
    amount: float = 0.0
    date: str = ""
    created_at: str = ""
    receipt_no: str | None = None
    puja_id: str | None = None


@dataclass(frozen=True)
class Notice(Record):
    id: str
    title: str
    description: str = ""
    date: str = ""
    is_important: bool = False
    created_at: str = ""


@dataclass(frozen=True)
class User(Record):
    id: str
    username: str
    password: str  # bcrypt hash (legacy files may hold plaintext)
    role: str = ROLE_VIEWER
    name: str = ""
    created_at: str = ""


# Entity list name (as in the data file) -> record class
COLLECTIONS: dict[str, type] = {
    "members": Member,
    "pujas": Puja,
    "contributions": Contribution,
    "income": OtherIncome,
    "expenses": Expense,
    "notices": Notice,
}


@dataclass
class Database:
    """The whole data file. Always saved and loaded as one unit."""

    members: list[Member] = field(default_factory=list)
    pujas: list[Puja] = field(default_factory=list)
    contributions: list[Contribution] = field(default_factory=list)
    income: list[OtherIncome] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    notices: list[Notice] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    last_updated: str = ""

    def copy(self) -> "Database":
        # Records are frozen, copying the lists is enough.
        return replace(
            self,
            **{name: list(getattr(self, name)) for name in COLLECTIONS},
            users=list(self.users),
        )

    def to_dict(self) -> dict:
        out = {name: [r.to_dict() for r in getattr(self, name)] for name in COLLECTIONS}
        out["users"] = [u.to_dict() for u in self.users]
        out["lastUpdated"] = self.last_updated
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_dict(cls, raw: dict, default_users: list[User] | None = None) -> "Database":
        raw = repair(raw, default_users or [])
        kwargs = {
            name: [rec_cls.from_dict(r) for r in raw[name]]
            for name, rec_cls in COLLECTIONS.items()
        }
        return cls(
            **kwargs,
            users=[User.from_dict(u) for u in raw["users"]],
            last_updated=str(raw.get("lastUpdated") or ""),
        )

    @classmethod
    def from_json(cls, text: str, default_users: list[User] | None = None) -> "Database":
        return cls.from_dict(json.loads(text), default_users)


def repair(raw: dict, default_users: list[User]) -> dict:
    """
    Fill in whatever a partially written or older data file is missing:
    absent lists become empty, an absent user list becomes the seeded users.
    """
    if not isinstance(raw, dict):
        raise ValueError("data file must hold a JSON object")
    fixed = dict(raw)
    for name in COLLECTIONS:
        if not isinstance(fixed.get(name), list):
            fixed[name] = []
    if not fixed.get("users"):
        fixed["users"] = [u.to_dict() for u in default_users]
    return fixed


def default_database(admin: User, now: str) -> Database:
    return Database(users=[admin], last_updated=now)
