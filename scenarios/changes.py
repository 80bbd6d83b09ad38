"""
Scenario change models.

A ``ScenarioChange`` is a discriminated union on ``type``; each variant carries
its own typed ``changes`` payload, validated when the change is built.  Models
are frozen, accept camelCase keys (``targetId``, ``percentChange``, ...) as well
as field names, and reject NaN/inf.
"""

import datetime as dt
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        allow_inf_nan=False,
    )


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

class NewTransaction(_Model):
    """Fields of a one-off added by a scenario; anything missing is defaulted on apply."""

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[Literal["income", "expense"]] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None
    note: Optional[str] = None
    parent_id: Optional[str] = None


class TransactionAddPayload(_Model):
    new_transaction: NewTransaction


class TransactionModifyPayload(_Model):
    amount: Optional[float] = None
    amount_multiplier: Optional[float] = None
    date: Optional[dt.date] = None
    frequency: Optional[str] = None


class BulkAdjustmentPayload(_Model):
    percent_change: float
    category_filter: Optional[str] = None
    type_filter: Optional[Literal["income", "expense"]] = None


class PercentPayload(_Model):
    percent_change: float
    category_filter: Optional[str] = None


class SettingOverridePayload(_Model):
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    starting_balance: Optional[float] = None

    @model_validator(mode="after")
    def _at_least_one(self):
        if self.start_date is None and self.end_date is None and self.starting_balance is None:
            raise ValueError("At least one setting override is required")
        return self


class EmptyPayload(_Model):
    pass


# ---------------------------------------------------------------------------
# Changes
# ---------------------------------------------------------------------------

class _Change(_Model):
    id: str
    description: str = ""
    target_id: Optional[str] = None
    target_type: Optional[str] = None


class TransactionAdd(_Change):
    type: Literal["transaction_add"] = "transaction_add"
    changes: TransactionAddPayload


class TransactionRemove(_Change):
    type: Literal["transaction_remove"] = "transaction_remove"
    target_id: str
    changes: EmptyPayload = EmptyPayload()


class TransactionModify(_Change):
    type: Literal["transaction_modify"] = "transaction_modify"
    target_id: str
    changes: TransactionModifyPayload


class BulkAdjustment(_Change):
    type: Literal["bulk_adjustment"] = "bulk_adjustment"
    changes: BulkAdjustmentPayload


class IncomeAdjust(_Change):
    """Scale income transactions and streams; ``target_id`` narrows to one entry or its children."""

    type: Literal["income_adjust"] = "income_adjust"
    changes: PercentPayload


class ExpenseAdjust(_Change):
    type: Literal["expense_adjust"] = "expense_adjust"
    changes: PercentPayload


class SettingOverride(_Change):
    type: Literal["setting_override"] = "setting_override"
    changes: SettingOverridePayload


ScenarioChange = Annotated[
    Union[
        TransactionAdd,
        TransactionRemove,
        TransactionModify,
        BulkAdjustment,
        IncomeAdjust,
        ExpenseAdjust,
        SettingOverride,
    ],
    Field(discriminator="type"),
]

CHANGE_ADAPTER = TypeAdapter(ScenarioChange)


# ---------------------------------------------------------------------------
# Conditions, scenarios, versions
# ---------------------------------------------------------------------------

ConditionValue = Union[bool, int, float, str]


class Condition(_Model):
    type: Literal["balance", "income", "expense", "transaction_count", "projection_day", "date"]
    operator: Literal[
        "equals",
        "not_equals",
        "greater_than",
        "less_than",
        "greater_than_or_equal",
        "less_than_or_equal",
    ]
    value: ConditionValue


class ConditionalChange(_Model):
    id: str
    conditions: Tuple[Condition, ...] = ()
    logical_operator: Literal["AND", "OR"] = "AND"
    change: ScenarioChange
    enabled: bool = True
    description: str = ""


class DateRange(_Model):
    """Inclusive period a scenario is meant for. Descriptive only; projections ignore it."""

    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def _ordered(self):
        if self.start_date > self.end_date:
            raise ValueError("Date range start must not be after its end")
        return self


class Scenario(_Model):
    id: str
    name: str = ""
    description: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None
    date_range: Optional[DateRange] = None
    color: Optional[str] = None
    changes: Tuple[ScenarioChange, ...] = ()
    conditional_changes: Tuple[ConditionalChange, ...] = ()
    current_version_number: int = 0
    notes: Optional[str] = None


class ScenarioVersion(_Model):
    """Immutable snapshot of a scenario's change list."""

    id: str
    scenario_id: str
    version_number: int
    timestamp: dt.datetime
    name: str = ""
    description: Optional[str] = None
    changes: Tuple[ScenarioChange, ...] = ()
    notes: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None


class VersionHistory(_Model):
    scenario_id: str
    versions: Tuple[ScenarioVersion, ...] = ()
    current_version_number: int = 0
