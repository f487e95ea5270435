import csv
from collections import Counter
from datetime import date
from io import StringIO
from typing import List, Tuple

from arena_payments.config import LEDGER_CATEGORY, Collection, PlayerPaymentStatus
from arena_payments.db import RecordStore
from arena_payments.helpers import load_fresh_tournament
from arena_payments.logging_config import get_logger
from arena_payments.schemas.domain import LedgerEntry, PaymentRecord, Tournament, UserRef, aggregate_payment_status
from arena_payments.schemas.results import ErrorCode, Failure, ReconciliationSuccess


logger = get_logger(__name__)


async def reconcile(
    store: RecordStore,
    tournament: Tournament,
    participant_id: str,
    acting_user: UserRef,
    payment: PaymentRecord | None = None,
) -> ReconciliationSuccess | Failure:
    """
    Mark ``acting_user`` as paid inside a participant and post the matching
    ledger entry.

    Every call posts a new entry; callers must not reconcile the same payment
    twice. The tournament is written whole, so concurrent payers race with
    last-write-wins.
    """
    try:
        tournament = await load_fresh_tournament(store, tournament)
        participant = tournament.get_participant(participant_id)
        if participant is None:
            return Failure(error=ErrorCode.PARTICIPANT_NOT_FOUND, message="Inscrição não encontrada.")
        player = participant.find_player(acting_user.id)
        if player is None:
            return Failure(error=ErrorCode.PLAYER_NOT_FOUND, message="Você não faz parte desta inscrição.")

        player.payment_status = PlayerPaymentStatus.PAGO
        participant.payment_status = aggregate_payment_status(participant.players)
        await store.upsert(Collection.TOURNAMENTS, [tournament.model_dump(mode="json")], tournament.arena_id)
        logger.info(
            "Player paid tournament=%s participant=%s profile=%s participantStatus=%s",
            tournament.id,
            participant.id,
            acting_user.id,
            participant.payment_status.value,
        )

        entry = LedgerEntry(
            arena_id=tournament.arena_id,
            description=f"Inscrição Torneio: {tournament.name} - {acting_user.name} (Equipe: {participant.name})",
            amount=tournament.resolve_fee(participant.category_id),
            date=date.today(),
            participant_id=participant.id,
            profile_id=acting_user.id,
            payment_id=payment.id if payment else None,
        )
        try:
            await store.upsert(Collection.LEDGER, [entry.model_dump(mode="json")], tournament.arena_id)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Player already stored as paid but ledger entry not posted tournament=%s participant=%s profile=%s amount=%s",
                tournament.id,
                participant.id,
                acting_user.id,
                entry.amount,
            )
            return Failure(
                error=ErrorCode.UNEXPECTED,
                message="Pagamento confirmado na inscrição, mas o lançamento financeiro não foi registrado.",
            )
        logger.info("Posted ledger entry id=%s amount=%s arena=%s", entry.id, entry.amount, entry.arena_id)
        return ReconciliationSuccess(tournament=tournament, ledger_entry=entry)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error reconciling participant=%s profile=%s", participant_id, acting_user.id)
        return Failure(error=ErrorCode.UNEXPECTED, message="Erro ao confirmar pagamento")


async def generate_ledger_report_csv(store: RecordStore, arena_id: str) -> Tuple[str, int]:
    """
    Compare paid players against tournament ledger entries and return CSV text plus mismatch count.
    """
    tournaments = [Tournament.model_validate(t) for t in await store.select(Collection.TOURNAMENTS, arena_id)]
    entries = [
        LedgerEntry.model_validate(e)
        for e in await store.select(Collection.LEDGER, arena_id)
        if e.get("category") == LEDGER_CATEGORY
    ]
    entry_counts = Counter((e.participant_id, e.profile_id) for e in entries)

    mismatches: List[tuple] = []
    for tournament in tournaments:
        for participant in tournament.participants:
            for player in participant.players:
                if player.payment_status != PlayerPaymentStatus.PAGO or not player.profile_id:
                    continue
                count = entry_counts.get((participant.id, player.profile_id), 0)
                if count == 1:
                    continue
                mismatches.append((
                    tournament.id,
                    participant.id,
                    player.profile_id,
                    player.name,
                    count,
                    "missing_entry" if count == 0 else "duplicate_entries",
                ))

    logger.info("Ledger report for arena=%s complete with %s mismatches", arena_id, len(mismatches))
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["tournamentId", "participantId", "profileId", "playerName", "ledgerEntries", "issue"])
    for row in mismatches:
        writer.writerow(row)

    return output.getvalue(), len(mismatches)
