"""
Relayed USDT payouts from approved user wallets to the admin cold wallet.

The recipient is never an input: it comes from the server-side network
configuration (EVM cold wallet for ERC-20/BEP-20, Tron cold wallet for
TRC-20). Allowance and decimals are re-read from the chain for every
request. Nothing is retried automatically.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ChainUnavailable,
    ConfigurationMissing,
    InsufficientAllowance,
    MarketplaceError,
    PayoutInProgress,
    PayoutValidationError,
)
from app.models.payout import PayoutRecord, PayoutStatus
from app.services.allowance_verifier import resolve_decimals, to_raw_amount, to_token_amount
from app.services.chain_adapters import ChainAdapterSet
from app.services.payout_guard import PayoutGuard
from app.services.wallet_registry import get_wallet

logger = logging.getLogger(__name__)


@dataclass
class PayoutResult:
    tx_hash: str
    payout_id: UUID
    wallet_id: UUID
    network: str
    amount: Decimal
    recipient: str
    status: str
    replayed: bool = False


class PayoutExecutor:
    def __init__(self, adapters: ChainAdapterSet, guard: PayoutGuard):
        self.adapters = adapters
        self.guard = guard

    async def send(
        self,
        db: AsyncSession,
        wallet_id,
        amount,
        requested_by: Optional[UUID] = None,
        idempotency_key: Optional[str] = None,
    ) -> PayoutResult:
        amount = self._validate_amount(amount)

        if idempotency_key:
            previous = await self._find_by_idempotency_key(db, idempotency_key)
            if previous is not None:
                return self._replay(previous, wallet_id)

        wallet = await get_wallet(db, wallet_id)
        config = self.adapters.config_for(wallet.network)
        if not config.cold_wallet:
            raise ConfigurationMissing(f"Admin cold wallet not configured for {config.network.value}")
        if not config.spender:
            raise ConfigurationMissing(f"Spender contract not configured for {config.network.value}")
        adapter = self.adapters.adapter_for(wallet.network)
        if not adapter.can_sign:
            raise ConfigurationMissing(f"Admin signer not configured for {config.network.value}")

        key = str(wallet.id)
        token = await self.guard.acquire(key)
        if token is None:
            logger.warning(f"Rejected concurrent payout for wallet {key}")
            raise PayoutInProgress("A payout for this wallet is already in progress")

        try:
            if await self._has_unresolved_payout(db, wallet.id):
                raise PayoutInProgress(
                    "This wallet has an unresolved payout; reconcile it before sending again"
                )

            decimals = resolve_decimals(await adapter.get_decimals(config.token))
            try:
                raw_amount = to_raw_amount(amount, decimals)
            except ValueError as e:
                raise PayoutValidationError(str(e))

            allowance = await adapter.get_allowance(wallet.address, config.spender, config.token)
            if allowance < raw_amount:
                raise InsufficientAllowance(to_token_amount(allowance, decimals), amount)

            record = PayoutRecord(
                wallet_id=wallet.id,
                network=wallet.network,
                owner_address=wallet.address,
                recipient=config.cold_wallet,
                spender=config.spender,
                amount=amount,
                raw_amount=str(raw_amount),
                decimals=decimals,
                status=PayoutStatus.PENDING,
                idempotency_key=idempotency_key,
                requested_by=requested_by,
            )
            db.add(record)
            await db.commit()
            await db.refresh(record)

            logger.info(
                f"Submitting payout {record.id}: {amount} USDT from {wallet.address} "
                f"({wallet.network}) to {config.cold_wallet}"
            )
            try:
                tx_hash = await adapter.execute_relayed_transfer(
                    config.spender, wallet.address, config.cold_wallet, raw_amount
                )
            except ChainUnavailable as e:
                # the broadcast may or may not have reached the chain
                await self._mark(db, record, PayoutStatus.UNKNOWN, error=e.message)
                raise
            except MarketplaceError as e:
                await self._mark(db, record, PayoutStatus.FAILED, error=e.message)
                raise
            except Exception as e:
                await self._mark(db, record, PayoutStatus.FAILED, error=str(e))
                raise

            await self._mark(db, record, PayoutStatus.SUBMITTED, tx_hash=tx_hash)
            logger.info(f"Payout {record.id} submitted: {tx_hash}")

            return PayoutResult(
                tx_hash=tx_hash,
                payout_id=record.id,
                wallet_id=wallet.id,
                network=wallet.network,
                amount=amount,
                recipient=config.cold_wallet,
                status=record.status,
            )
        finally:
            await self.guard.release(key, token)

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, TypeError, ValueError):
            raise PayoutValidationError("Positive amount required")
        if not value.is_finite() or value <= 0:
            raise PayoutValidationError("Positive amount required")
        return value

    @staticmethod
    async def _find_by_idempotency_key(db: AsyncSession, key: str) -> Optional[PayoutRecord]:
        result = await db.execute(select(PayoutRecord).where(PayoutRecord.idempotency_key == key))
        return result.scalar_one_or_none()

    @staticmethod
    def _replay(record: PayoutRecord, wallet_id) -> PayoutResult:
        if str(record.wallet_id) != str(wallet_id):
            raise PayoutValidationError("Idempotency key already used for another wallet")
        if record.status == PayoutStatus.FAILED:
            raise PayoutValidationError(
                "Idempotency key belongs to a failed payout; retry with a new idempotency key"
            )
        if not record.tx_hash:
            raise PayoutInProgress(
                f"Payout for this idempotency key is {record.status} without a transaction hash"
            )
        return PayoutResult(
            tx_hash=record.tx_hash,
            payout_id=record.id,
            wallet_id=record.wallet_id,
            network=record.network,
            amount=Decimal(record.amount),
            recipient=record.recipient,
            status=record.status,
            replayed=True,
        )

    @staticmethod
    async def _has_unresolved_payout(db: AsyncSession, wallet_id) -> bool:
        result = await db.execute(
            select(PayoutRecord.id).where(
                PayoutRecord.wallet_id == wallet_id,
                PayoutRecord.status.in_([PayoutStatus.PENDING, PayoutStatus.UNKNOWN]),
            ).limit(1)
        )
        return result.first() is not None

    @staticmethod
    async def _mark(db: AsyncSession, record: PayoutRecord, status: str, tx_hash=None, error=None):
        record.status = status
        if tx_hash is not None:
            record.tx_hash = tx_hash
        if error is not None:
            record.error = error
        await db.commit()
        await db.refresh(record)
