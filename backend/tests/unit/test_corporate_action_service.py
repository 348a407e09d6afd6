"""Tests for CorporateActionService."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from corporate_actions.exceptions import (
    ActionNotFoundError,
    ErrorCode,
    InvalidAmountError,
    InvalidRatioError,
    MissingParameterError,
    NotPendingError,
    UnknownActionTypeError,
    UnknownSymbolError,
)
from corporate_actions.types import ActionStatus, ActionType, MergerType
from models import CorporateAction, Security
from schemas.corporate_action import CorporateActionCreate
from services.corporate_action_service import CorporateActionService, terms_from_action
from tests.fixtures import create_action


def _split(symbol_id: str, **overrides) -> CorporateActionCreate:
    data = {
        "action_type": ActionType.SPLIT,
        "symbol_id": symbol_id,
        "ex_date": date(2024, 6, 1),
        "description": "2-for-1 split",
        "ratio_from": Decimal("1"),
        "ratio_to": Decimal("2"),
    }
    data.update(overrides)
    return CorporateActionCreate(**data)


class TestCreateAction:
    def test_creates_pending_action(self, db, security):
        action = CorporateActionService.create_action(db, _split(security.id))

        assert action.id is not None
        assert action.status == ActionStatus.PENDING.value
        assert action.action_type == "split"
        assert action.ratio_to == Decimal("2")
        assert action.source == "manual"
        assert action.currency == "USD"

    def test_unknown_symbol(self, db):
        with pytest.raises(UnknownSymbolError) as exc_info:
            CorporateActionService.create_action(db, _split("missing"))
        assert exc_info.value.code == ErrorCode.UNKNOWN_SYMBOL

    def test_invalid_parameters_not_persisted(self, db, security):
        with pytest.raises(InvalidRatioError):
            CorporateActionService.create_action(db, _split(security.id, ratio_to=Decimal("0")))
        assert db.query(CorporateAction).count() == 0

    def test_dividend_requires_amount(self, db, security):
        data = CorporateActionCreate(
            action_type=ActionType.CASH_DIVIDEND,
            symbol_id=security.id,
            ex_date=date(2024, 6, 1),
            description="Quarterly dividend",
        )
        with pytest.raises(InvalidAmountError):
            CorporateActionService.create_action(db, data)

    def test_merger_requires_type(self, db, security):
        data = CorporateActionCreate(
            action_type=ActionType.MERGER,
            symbol_id=security.id,
            ex_date=date(2024, 6, 1),
            description="Acquired",
            cash_per_share=Decimal("80"),
        )
        with pytest.raises(UnknownActionTypeError):
            CorporateActionService.create_action(db, data)

    def test_merger_type_stored(self, db, security):
        data = CorporateActionCreate(
            action_type=ActionType.MERGER,
            symbol_id=security.id,
            ex_date=date(2024, 6, 1),
            description="Acquired",
            merger_type=MergerType.CASH,
            cash_per_share=Decimal("80"),
        )
        action = CorporateActionService.create_action(db, data)
        assert action.merger_type == "cash"

    def test_spinoff_with_new_ticker_registers_security(self, db, security):
        data = CorporateActionCreate(
            action_type=ActionType.SPINOFF,
            symbol_id=security.id,
            ex_date=date(2024, 6, 1),
            description="Spin",
            new_ticker="spco",
            new_security_name="SpinCo",
            exchange_ratio=Decimal("1"),
            basis_allocation_percent=Decimal("20"),
        )
        action = CorporateActionService.create_action(db, data)

        new_security = db.query(Security).filter_by(ticker="SPCO").one()
        assert action.new_symbol_id == new_security.id
        assert new_security.name == "SpinCo"

    def test_spinoff_with_unknown_new_symbol(self, db, security):
        data = CorporateActionCreate(
            action_type=ActionType.SPINOFF,
            symbol_id=security.id,
            ex_date=date(2024, 6, 1),
            description="Spin",
            new_symbol_id="missing",
            exchange_ratio=Decimal("1"),
            basis_allocation_percent=Decimal("20"),
        )
        with pytest.raises(UnknownSymbolError):
            CorporateActionService.create_action(db, data)

    def test_spinoff_without_new_symbol(self, db, security):
        data = CorporateActionCreate(
            action_type=ActionType.SPINOFF,
            symbol_id=security.id,
            ex_date=date(2024, 6, 1),
            description="Spin",
            exchange_ratio=Decimal("1"),
            basis_allocation_percent=Decimal("20"),
        )
        with pytest.raises(MissingParameterError):
            CorporateActionService.create_action(db, data)


class TestTerms:
    def test_terms_from_action(self, db, security, spinco):
        action = create_action(
            db,
            security,
            "spinoff",
            new_symbol_id=spinco.id,
            exchange_ratio=Decimal("0.5"),
            basis_allocation_percent=Decimal("12.5"),
        )
        terms = terms_from_action(action)

        assert terms.action_type == ActionType.SPINOFF
        assert terms.action_id == action.id
        assert terms.new_symbol_id == spinco.id
        assert terms.exchange_ratio == Decimal("0.5")
        assert terms.basis_allocation_percent == Decimal("12.5")


class TestQueries:
    def test_get_action_not_found(self, db):
        with pytest.raises(ActionNotFoundError) as exc_info:
            CorporateActionService.get_action(db, "missing")
        assert exc_info.value.code == ErrorCode.ACTION_NOT_FOUND

    def test_list_by_symbol_newest_first(self, db, security, spinco):
        older = create_action(db, security, "split", date(2023, 1, 1))
        newer = create_action(db, security, "split", date(2024, 1, 1))
        create_action(db, spinco, "split", date(2024, 2, 1))

        actions = CorporateActionService.list_by_symbol(db, security.id)
        assert [a.id for a in actions] == [newer.id, older.id]

    def test_list_pending_due_only_in_apply_order(self, db, security, spinco):
        later = create_action(db, security, "split", date(2024, 3, 1))
        earlier = create_action(db, security, "split", date(2024, 1, 1))
        create_action(db, security, "split", date.today() + timedelta(days=30))
        create_action(db, security, "split", date(2023, 1, 1), status="applied")
        other = create_action(db, spinco, "split", date(2024, 2, 1))

        assert [a.id for a in CorporateActionService.list_pending(db, symbol_id=security.id)] == [
            earlier.id,
            later.id,
        ]
        assert [a.id for a in CorporateActionService.list_pending(db)] == [
            earlier.id,
            other.id,
            later.id,
        ]

    def test_list_pending_as_of(self, db, security):
        create_action(db, security, "split", date(2024, 3, 1))
        assert CorporateActionService.list_pending(db, as_of=date(2024, 2, 1)) == []

    def test_list_by_status(self, db, security):
        applied = create_action(db, security, "split", status="applied")
        create_action(db, security, "split")

        assert [a.id for a in CorporateActionService.list_by_status(db, ActionStatus.APPLIED)] == [
            applied.id
        ]
        assert len(CorporateActionService.list_by_status(db, "pending")) == 1

    def test_list_by_date_range_inclusive(self, db, security):
        first = create_action(db, security, "split", date(2024, 1, 1))
        last = create_action(db, security, "split", date(2024, 1, 31))
        create_action(db, security, "split", date(2024, 2, 1))

        actions = CorporateActionService.list_by_date_range(db, date(2024, 1, 1), date(2024, 1, 31))
        assert [a.id for a in actions] == [first.id, last.id]

    def test_list_actions_filters(self, db, security, spinco):
        match = create_action(db, security, "split", date(2024, 1, 15))
        create_action(db, security, "split", date(2024, 1, 20), status="cancelled")
        create_action(db, spinco, "split", date(2024, 1, 15))

        actions = CorporateActionService.list_actions(
            db,
            symbol_id=security.id,
            status=ActionStatus.PENDING,
            start=date(2024, 1, 1),
            end=date(2024, 1, 31),
        )
        assert [a.id for a in actions] == [match.id]


class TestCancel:
    def test_cancel_pending(self, db, security):
        action = create_action(db, security, "split")
        cancelled = CorporateActionService.cancel(db, action.id)
        assert cancelled.status == ActionStatus.CANCELLED.value

    @pytest.mark.parametrize("status", ["applied", "reversed", "cancelled"])
    def test_cancel_requires_pending(self, db, security, status):
        action = create_action(db, security, "split", status=status)
        with pytest.raises(NotPendingError):
            CorporateActionService.cancel(db, action.id)

    def test_cancel_unknown(self, db):
        with pytest.raises(ActionNotFoundError):
            CorporateActionService.cancel(db, "missing")
