"""Test fixtures and sample data."""
import pytest
from datetime import date
from decimal import Decimal

from models import Account, CorporateAction, HoldingLot, Security
from sqlalchemy.orm import Session


def get_or_create_security(
    db: Session,
    ticker: str,
    name: str | None = None,
    quantity_increment: Decimal | None = None,
) -> Security:
    """Get or create a Security record for the given ticker.

    This is a helper function (not a fixture) for tests that need to create
    several securities or control the tradable increment.
    """
    security = db.query(Security).filter_by(ticker=ticker).first()
    if not security:
        security = Security(
            ticker=ticker,
            name=name or f"{ticker} Inc.",
            quantity_increment=quantity_increment,
        )
        db.add(security)
        db.flush()
    return security


def create_account(db: Session, name: str = "Taxable Brokerage") -> Account:
    acct = Account(name=name, institution_name="Test Broker", is_active=True)
    db.add(acct)
    db.flush()
    return acct


def create_lot(
    db: Session,
    account: Account,
    security: Security,
    quantity: Decimal | str,
    cost_basis_per_unit: Decimal | str,
    acquisition_date: date = date(2023, 1, 15),
) -> HoldingLot:
    """Create an open manual lot."""
    quantity = Decimal(quantity)
    lot = HoldingLot(
        account_id=account.id,
        security_id=security.id,
        ticker=security.ticker,
        acquisition_date=acquisition_date,
        cost_basis_per_unit=Decimal(cost_basis_per_unit),
        original_quantity=quantity,
        current_quantity=quantity,
        is_closed=False,
        source="manual",
    )
    db.add(lot)
    db.flush()
    return lot


def create_action(
    db: Session,
    security: Security,
    action_type: str,
    ex_date: date = date(2024, 6, 1),
    **params,
) -> CorporateAction:
    """Insert a pending CorporateAction directly, bypassing validation."""
    action = CorporateAction(
        action_type=action_type,
        symbol_id=security.id,
        ex_date=ex_date,
        description=params.pop("description", f"Test {action_type}"),
        source="manual",
        status=params.pop("status", "pending"),
        qualified=params.pop("qualified", False),
        **params,
    )
    db.add(action)
    db.flush()
    return action


@pytest.fixture
def account(db: Session) -> Account:
    """Create a test account."""
    return create_account(db)


@pytest.fixture
def security(db: Session) -> Security:
    """Create the security most tests act on."""
    return get_or_create_security(db, "AAPL", "Apple Inc.")


@pytest.fixture
def spinco(db: Session) -> Security:
    """A second security used as spinoff target."""
    return get_or_create_security(db, "SPCO", "SpinCo Holdings")


@pytest.fixture
def holding_lot(db: Session, account: Account, security: Security) -> HoldingLot:
    """100 shares @ $200 bought well before any test ex-date."""
    return create_lot(db, account, security, "100", "200")
