"""
vaultguard.auditor

Vault-wide security audit. Pure functions over the full record list;
callers recompute on every change, nothing is cached.

- audit(records): weak / old / duplicate sets, aggregate score,
  strength and category distributions
- age_report(records): count of records per age bucket
- security_rating(score): the dashboard's headline for a score

The weak criterion here is a 5-point checklist and is deliberately
separate from score.score_password.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Category, PasswordRecord

OLD_AFTER_DAYS = 90
MIN_CRITERIA = 3

STRENGTH_BUCKETS = ("Weak", "Moderate", "Strong", "Very Strong")
CATEGORY_BUCKETS = ((Category.DEVICE, "Devices"), (Category.APPLICATION, "Applications"))
AGE_BUCKETS = ("0-30 days", "31-90 days", "91-180 days", "181+ days")


@dataclass(frozen=True)
class AuditSnapshot:
    security_score: int = 0
    total: int = 0
    weak: Tuple[PasswordRecord, ...] = ()
    old: Tuple[PasswordRecord, ...] = ()
    duplicates: Tuple[PasswordRecord, ...] = ()
    strength_distribution: Dict[str, int] = field(default_factory=dict)
    category_distribution: Dict[str, int] = field(default_factory=dict)

    @property
    def issue_count(self) -> int:
        return len(self.weak) + len(self.old) + len(self.duplicates)

    def summary(self) -> List[str]:
        """One sentence per issue type, as shown on the dashboard cards."""
        lines = []
        if not self.weak:
            lines.append("No weak passwords found")
        else:
            pct = _round_half_up(len(self.weak) / self.total * 100)
            lines.append(f"{pct}% of your passwords are weak")
        if not self.old:
            lines.append("All passwords are up to date")
        else:
            lines.append(f"{len(self.old)} passwords older than {OLD_AFTER_DAYS} days")
        if not self.duplicates:
            lines.append("No duplicate passwords")
        else:
            lines.append(f"{len(self.duplicates)} passwords are duplicated")
        return lines

    def to_dict(self) -> dict:
        return {
            "securityScore": self.security_score,
            "total": self.total,
            "rating": security_rating(self.security_score),
            "weak": [r.id for r in self.weak],
            "old": [r.id for r in self.old],
            "duplicates": [r.id for r in self.duplicates],
            "strengthDistribution": dict(self.strength_distribution),
            "categoryDistribution": dict(self.category_distribution),
            "summary": self.summary(),
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def criteria_met(password: str) -> int:
    """Count of: uppercase, lowercase, digit, symbol, length >= 12."""
    checks = (
        re.search(r"[A-Z]", password),
        re.search(r"[a-z]", password),
        re.search(r"[0-9]", password),
        re.search(r"[^a-zA-Z0-9]", password),
        len(password) >= 12,
    )
    return sum(1 for c in checks if c)


def strength_bucket(met: int) -> str:
    if met <= 2:
        return "Weak"
    if met == 3:
        return "Moderate"
    if met == 4:
        return "Strong"
    return "Very Strong"


def is_weak(record: PasswordRecord) -> bool:
    return criteria_met(record.password) < MIN_CRITERIA


def is_old(record: PasswordRecord, now: datetime) -> bool:
    if record.created_at is None:
        return False
    return record.created_at < now - timedelta(days=OLD_AFTER_DAYS)


def find_duplicates(records: Sequence[PasswordRecord]) -> List[PasswordRecord]:
    """Every record whose plaintext appeared earlier in the list. The first holder is not flagged."""
    seen = set()
    duplicates = []
    for rec in records:
        if rec.password in seen:
            duplicates.append(rec)
        else:
            seen.add(rec.password)
    return duplicates


def _counts(names: Iterable[str], order: Iterable[str]) -> Dict[str, int]:
    tally = dict.fromkeys(order, 0)
    for name in names:
        tally[name] += 1
    return {name: n for name, n in tally.items() if n > 0}


def audit(records: Iterable[PasswordRecord], now: Optional[datetime] = None) -> AuditSnapshot:
    records = list(records)
    if not records:
        return AuditSnapshot()
    now = now or datetime.now(timezone.utc)

    met = [criteria_met(r.password) for r in records]
    weak = tuple(r for r, m in zip(records, met) if m < MIN_CRITERIA)
    old = tuple(r for r in records if is_old(r, now))
    duplicates = tuple(find_duplicates(records))

    # worst case is three issues per record
    total_issues = len(weak) + len(old) + len(duplicates)
    score = max(0.0, 100 - total_issues / (len(records) * 3) * 100)

    category_names = dict(CATEGORY_BUCKETS)
    return AuditSnapshot(
        security_score=_round_half_up(score),
        total=len(records),
        weak=weak,
        old=old,
        duplicates=duplicates,
        strength_distribution=_counts((strength_bucket(m) for m in met), STRENGTH_BUCKETS),
        category_distribution=_counts(
            (category_names[r.category] for r in records), category_names.values()
        ),
    )


def age_in_days(record: PasswordRecord, now: datetime) -> Optional[int]:
    if record.created_at is None:
        return None
    return math.floor((now - record.created_at).total_seconds() / 86400)


def age_report(records: Iterable[PasswordRecord], now: Optional[datetime] = None) -> Dict[str, int]:
    """Records per age bucket. Records without a creation time are left out."""
    now = now or datetime.now(timezone.utc)
    report = dict.fromkeys(AGE_BUCKETS, 0)
    for rec in records:
        days = age_in_days(rec, now)
        if days is None:
            continue
        if days <= 30:
            report["0-30 days"] += 1
        elif days <= 90:
            report["31-90 days"] += 1
        elif days <= 180:
            report["91-180 days"] += 1
        else:
            report["181+ days"] += 1
    return report


def security_rating(score: int) -> str:
    if score >= 80:
        return "Excellent security"
    if score >= 60:
        return "Good security"
    if score >= 40:
        return "Fair security"
    return "Poor security"
