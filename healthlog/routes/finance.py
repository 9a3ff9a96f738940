"""
Finance endpoints - accounts, transactions, loans and loan repayments.

Loans and repayments are mirrored as transactions so that account balances
stay consistent; every endpoint touching more than one table runs in a
single database transaction.
"""
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from healthlog.database.connection import get_db_session
from healthlog.database.queries import execute_with_retry, fetch_all, fetch_one
from healthlog.models.schemas import (
    AccountPayload,
    TransactionPayload,
    LoanPayload,
    LoanStatusPayload,
    RepaymentPayload,
)
from healthlog.services.auth import get_current_user_id
from healthlog.services.finance_service import (
    compute_balances,
    loan_transaction,
    remaining_principal,
    repayment_transaction,
    to_decimal,
)
from healthlog.utils.errors import server_error
from healthlog.utils.validators import like_pattern, parse_date, require_fields, validate_choice

router = APIRouter(prefix="/api/finance")

TRANSACTION_TYPES = ("income", "expense")
LOAN_TYPES = ("lend", "borrow")
LOAN_STATUSES = ("paid", "unpaid")
DEFAULT_TRANSACTION_LIMIT = 10


async def _account_belongs_to(session: AsyncSession, account_id: int, user_id: int) -> bool:
    result = await session.execute(
        text("SELECT id FROM accounts WHERE id = :id AND user_id = :uid").bindparams(id=account_id, uid=user_id)
    )
    return result.first() is not None


def _optional_date(value: Optional[str], field: str) -> date:
    return parse_date(value, field) if value else date.today()


# --- Accounts ---

@router.get("/accounts")
async def list_accounts(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Accounts with current_balance derived from their transactions"""
    try:
        accounts = await fetch_all(
            session,
            text("SELECT * FROM accounts WHERE user_id = :uid").bindparams(uid=user_id)
        )
        totals = await fetch_all(
            session,
            text("""
                SELECT account_id, transaction_type, SUM(amount) AS total
                FROM transactions
                WHERE user_id = :uid
                GROUP BY account_id, transaction_type
            """).bindparams(uid=user_id)
        )
        return compute_balances(accounts, totals)
    except Exception as e:
        return server_error("list_accounts", e)


@router.post("/accounts", status_code=201)
async def create_account(
    body: AccountPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Account name is required", body.account_name)

    try:
        result = await session.execute(
            text("""
                INSERT INTO accounts (user_id, account_name, initial_balance)
                VALUES (:uid, :account_name, :initial_balance)
            """).bindparams(uid=user_id, account_name=body.account_name.strip(), initial_balance=body.initial_balance)
        )
        await session.commit()
        account = await fetch_one(
            session,
            text("SELECT * FROM accounts WHERE id = :id").bindparams(id=result.lastrowid)
        )
        return {**account, "current_balance": float(to_decimal(account["initial_balance"]))}
    except Exception as e:
        return server_error("create_account", e)


# --- Transactions ---

@router.get("/transactions")
async def list_transactions(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    category: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Recent transactions, or a search when a date range or category is given.
    Without filters only the latest 10 are returned unless limit=all.
    """
    sql = """
        SELECT t.*, a.account_name
        FROM transactions t
        JOIN accounts a ON t.account_id = a.id
        WHERE t.user_id = :uid
    """
    params = {"uid": user_id}
    is_searching = False

    if start_date and end_date:
        sql += " AND t.transaction_date BETWEEN :start AND :end"
        params["start"] = parse_date(start_date, "startDate")
        params["end"] = parse_date(end_date, "endDate")
        is_searching = True

    if category:
        sql += " AND t.category LIKE :category"
        params["category"] = like_pattern(category)
        is_searching = True

    sql += " ORDER BY t.transaction_date DESC, t.id DESC"

    if not is_searching and limit != "all":
        sql += f" LIMIT {DEFAULT_TRANSACTION_LIMIT}"

    try:
        return await fetch_all(session, text(sql).bindparams(**params))
    except Exception as e:
        return server_error("list_transactions", e)


@router.post("/transactions", status_code=201)
async def create_transaction(
    body: TransactionPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    require_fields("Account and amount are required", body.account_id, body.amount)
    transaction_type = validate_choice(body.transaction_type, TRANSACTION_TYPES, "transaction_type")
    transaction_date = _optional_date(body.transaction_date, "transaction_date")

    try:
        if not await _account_belongs_to(session, body.account_id, user_id):
            raise HTTPException(status_code=404, detail="Account not found")

        result = await session.execute(
            text("""
                INSERT INTO transactions
                    (user_id, account_id, transaction_type, amount, category, notes, transaction_date)
                VALUES (:uid, :account_id, :transaction_type, :amount, :category, :notes, :transaction_date)
            """).bindparams(
                uid=user_id,
                account_id=body.account_id,
                transaction_type=transaction_type,
                amount=body.amount,
                category=body.category,
                notes=body.notes,
                transaction_date=transaction_date,
            )
        )
        await session.commit()
        return await fetch_one(
            session,
            text("SELECT * FROM transactions WHERE id = :id").bindparams(id=result.lastrowid)
        )
    except HTTPException:
        raise
    except Exception as e:
        return server_error("create_transaction", e)


@router.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Delete a plain transaction.
    Repayment transactions should go through DELETE /repayments/{id} instead.
    """
    try:
        result = await execute_with_retry(
            session,
            text("DELETE FROM transactions WHERE id = :id AND user_id = :uid").bindparams(
                id=transaction_id, uid=user_id
            )
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Transaction not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_transaction", e)


# --- Loans ---

@router.get("/loans")
async def list_loans(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Loans with total_repaid and remaining_amount; open loans first"""
    try:
        return await fetch_all(
            session,
            text("""
                SELECT
                    l.*,
                    COALESCE(lr.total_repaid, 0) AS total_repaid,
                    l.amount - COALESCE(lr.total_repaid, 0) AS remaining_amount
                FROM loans l
                LEFT JOIN (
                    SELECT loan_id, SUM(amount) AS total_repaid
                    FROM loan_repayments
                    WHERE user_id = :uid
                    GROUP BY loan_id
                ) lr ON l.id = lr.loan_id
                WHERE l.user_id = :uid
                ORDER BY l.status ASC, l.loan_date DESC
            """).bindparams(uid=user_id)
        )
    except Exception as e:
        return server_error("list_loans", e)


@router.post("/loans", status_code=201)
async def create_loan(
    body: LoanPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a loan and the account movement it causes"""
    require_fields("Person name, amount and account are required", body.person_name, body.amount, body.account_id)
    loan_type = validate_choice(body.loan_type, LOAN_TYPES, "loan_type")
    loan_date = _optional_date(body.loan_date, "loan_date")
    person_name = body.person_name.strip()

    try:
        async with session.begin():
            if not await _account_belongs_to(session, body.account_id, user_id):
                raise HTTPException(status_code=404, detail="Account not found")

            result = await session.execute(
                text("""
                    INSERT INTO loans (user_id, loan_type, person_name, amount, notes, loan_date)
                    VALUES (:uid, :loan_type, :person_name, :amount, :notes, :loan_date)
                """).bindparams(
                    uid=user_id,
                    loan_type=loan_type,
                    person_name=person_name,
                    amount=body.amount,
                    notes=body.notes,
                    loan_date=loan_date,
                )
            )
            loan_id = result.lastrowid

            transaction_type, category, notes = loan_transaction(loan_type, person_name)
            await session.execute(
                text("""
                    INSERT INTO transactions
                        (user_id, account_id, transaction_type, amount, category, notes, transaction_date)
                    VALUES (:uid, :account_id, :transaction_type, :amount, :category, :notes, :transaction_date)
                """).bindparams(
                    uid=user_id,
                    account_id=body.account_id,
                    transaction_type=transaction_type,
                    amount=body.amount,
                    category=category,
                    notes=notes,
                    transaction_date=loan_date,
                )
            )

        return await fetch_one(
            session,
            text("SELECT * FROM loans WHERE id = :id").bindparams(id=loan_id)
        )
    except HTTPException:
        raise
    except Exception as e:
        return server_error("create_loan", e)


@router.put("/loans/{loan_id}/status")
async def update_loan_status(
    loan_id: int,
    body: LoanStatusPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Manually settle or reopen a loan"""
    status = validate_choice(body.status, LOAN_STATUSES, "status")
    repayment_date = datetime.now() if status == "paid" else None

    try:
        result = await execute_with_retry(
            session,
            text("""
                UPDATE loans SET status = :status, repayment_date = :repayment_date
                WHERE id = :id AND user_id = :uid
            """).bindparams(status=status, repayment_date=repayment_date, id=loan_id, uid=user_id)
        )
        await session.commit()
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Loan not found")
        return {"message": "Loan status updated"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("update_loan_status", e)


@router.post("/loans/{loan_id}/repay")
async def repay_loan(
    loan_id: int,
    body: RepaymentPayload,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Record a partial or full repayment.

    The loan row is locked for the duration of the transaction. The repayment
    may not exceed the remaining principal; when the principal is fully
    covered the loan is marked paid.
    """
    require_fields("Repayment amount and account are required", body.amount, body.account_id)
    repayment_date = _optional_date(body.repayment_date, "repayment_date")

    try:
        async with session.begin():
            result = await session.execute(
                text("SELECT * FROM loans WHERE id = :id AND user_id = :uid FOR UPDATE").bindparams(
                    id=loan_id, uid=user_id
                )
            )
            loan = result.mappings().first()
            if loan is None:
                raise HTTPException(status_code=404, detail="Loan not found")
            if loan["status"] == "paid":
                raise HTTPException(status_code=409, detail="Loan is already paid off")

            if not await _account_belongs_to(session, body.account_id, user_id):
                raise HTTPException(status_code=404, detail="Account not found")

            result = await session.execute(
                text("SELECT COALESCE(SUM(amount), 0) FROM loan_repayments WHERE loan_id = :id").bindparams(
                    id=loan_id
                )
            )
            remaining = remaining_principal(loan["amount"], result.scalar())
            if to_decimal(body.amount) > remaining:
                raise HTTPException(
                    status_code=400,
                    detail=f"Repayment exceeds the remaining amount of {remaining}"
                )

            transaction_type, category, notes = repayment_transaction(loan["loan_type"], loan["person_name"])
            result = await session.execute(
                text("""
                    INSERT INTO transactions
                        (user_id, account_id, transaction_type, amount, category, notes, transaction_date)
                    VALUES (:uid, :account_id, :transaction_type, :amount, :category, :notes, :transaction_date)
                """).bindparams(
                    uid=user_id,
                    account_id=body.account_id,
                    transaction_type=transaction_type,
                    amount=body.amount,
                    category=category,
                    notes=notes,
                    transaction_date=repayment_date,
                )
            )
            transaction_id = result.lastrowid

            await session.execute(
                text("""
                    INSERT INTO loan_repayments
                        (user_id, loan_id, account_id, amount, repayment_date, transaction_id)
                    VALUES (:uid, :loan_id, :account_id, :amount, :repayment_date, :transaction_id)
                """).bindparams(
                    uid=user_id,
                    loan_id=loan_id,
                    account_id=body.account_id,
                    amount=body.amount,
                    repayment_date=repayment_date,
                    transaction_id=transaction_id,
                )
            )

            if to_decimal(body.amount) >= remaining:
                await session.execute(
                    text("UPDATE loans SET status = 'paid', repayment_date = NOW() WHERE id = :id").bindparams(
                        id=loan_id
                    )
                )
        return {"message": "Repayment recorded"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("repay_loan", e)


@router.get("/loans/{loan_id}/repayments")
async def list_repayments(
    loan_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        return await fetch_all(
            session,
            text("""
                SELECT lr.*, a.account_name
                FROM loan_repayments lr
                JOIN accounts a ON lr.account_id = a.id
                WHERE lr.loan_id = :loan_id AND lr.user_id = :uid
                ORDER BY lr.repayment_date DESC, lr.id DESC
            """).bindparams(loan_id=loan_id, uid=user_id)
        )
    except Exception as e:
        return server_error("list_repayments", e)


@router.delete("/loans/{loan_id}", status_code=204)
async def delete_loan(
    loan_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Delete a loan with all of its repayment records.
    The mirrored transactions stay: they are real account movements.
    """
    try:
        async with session.begin():
            result = await session.execute(
                text("SELECT id FROM loans WHERE id = :id AND user_id = :uid").bindparams(id=loan_id, uid=user_id)
            )
            if result.first() is None:
                raise HTTPException(status_code=404, detail="Loan not found")

            await session.execute(
                text("DELETE FROM loan_repayments WHERE loan_id = :id AND user_id = :uid").bindparams(
                    id=loan_id, uid=user_id
                )
            )
            await session.execute(
                text("DELETE FROM loans WHERE id = :id AND user_id = :uid").bindparams(id=loan_id, uid=user_id)
            )
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_loan", e)


@router.delete("/repayments/{repayment_id}")
async def delete_repayment(
    repayment_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Undo a repayment: drop it and its transaction, reopen the loan if needed"""
    try:
        async with session.begin():
            result = await session.execute(
                text("SELECT * FROM loan_repayments WHERE id = :id AND user_id = :uid").bindparams(
                    id=repayment_id, uid=user_id
                )
            )
            repayment = result.mappings().first()
            if repayment is None:
                raise HTTPException(status_code=404, detail="Repayment not found")

            loan_id = repayment["loan_id"]

            if repayment["transaction_id"]:
                await session.execute(
                    text("DELETE FROM transactions WHERE id = :id AND user_id = :uid").bindparams(
                        id=repayment["transaction_id"], uid=user_id
                    )
                )

            await session.execute(
                text("DELETE FROM loan_repayments WHERE id = :id").bindparams(id=repayment_id)
            )

            result = await session.execute(
                text("SELECT amount FROM loans WHERE id = :id FOR UPDATE").bindparams(id=loan_id)
            )
            loan_amount = result.scalar()

            result = await session.execute(
                text("SELECT COALESCE(SUM(amount), 0) FROM loan_repayments WHERE loan_id = :id").bindparams(
                    id=loan_id
                )
            )
            if loan_amount is not None and remaining_principal(loan_amount, result.scalar()) > 0:
                await session.execute(
                    text("UPDATE loans SET status = 'unpaid', repayment_date = NULL WHERE id = :id").bindparams(
                        id=loan_id
                    )
                )
        return {"message": "Repayment deleted"}
    except HTTPException:
        raise
    except Exception as e:
        return server_error("delete_repayment", e)
