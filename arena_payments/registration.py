from typing import Optional

from arena_payments.config import Collection, InviteStatus, Modality, ParticipantPaymentStatus, PlayerPaymentStatus
from arena_payments.db import RecordStore
from arena_payments.errors import ArenaPaymentsError
from arena_payments.helpers import load_fresh_tournament
from arena_payments.logging_config import get_logger
from arena_payments.notifications import send_tournament_invite
from arena_payments.schemas.domain import MemberCustomer, Participant, PlayerEntry, Tournament, UserRef
from arena_payments.schemas.results import AdmissionSuccess, ErrorCode, Failure


logger = get_logger(__name__)

TEAM_MODALITIES = (Modality.DUPLAS, Modality.EQUIPES)
ACTIVE_INVITE_STATUSES = (InviteStatus.ACCEPTED, InviteStatus.PENDING)


def is_registered_in_category(tournament: Tournament, category_id: str, profile_id: str) -> bool:
    return any(
        player.profile_id == profile_id and player.status in ACTIVE_INVITE_STATUSES
        for participant in tournament.participants
        if participant.category_id == category_id
        for player in participant.players
    )


def validate_admission(
    tournament: Tournament,
    category_id: str,
    team_name: str,
    primary_user: Optional[UserRef],
    member: Optional[MemberCustomer],
) -> None:
    if primary_user is None:
        raise ArenaPaymentsError(ErrorCode.UNAUTHENTICATED, "Você precisa estar logado para se inscrever.")
    if member is None:
        raise ArenaPaymentsError(
            ErrorCode.PROFILE_NOT_READY,
            "Perfil de aluno não encontrado para esta arena. Tente novamente em instantes.",
        )
    if not category_id or tournament.get_category(category_id) is None:
        raise ArenaPaymentsError(ErrorCode.INVALID_CATEGORY, "Por favor, selecione uma categoria.")
    if tournament.modality != Modality.INDIVIDUAL and not (team_name or "").strip():
        raise ArenaPaymentsError(ErrorCode.MISSING_TEAM_NAME, "Por favor, insira o nome da sua dupla/equipe.")
    if is_registered_in_category(tournament, category_id, primary_user.id):
        raise ArenaPaymentsError(ErrorCode.DUPLICATE_REGISTRATION, "Você já está inscrito nesta categoria.")


def build_participant(
    tournament: Tournament,
    category_id: str,
    team_name: str,
    primary_user: UserRef,
    member: MemberCustomer,
    partner: Optional[UserRef] = None,
) -> Participant:
    players = [PlayerEntry(
        profile_id=primary_user.id,
        member_id=member.id,
        name=primary_user.name,
        phone=primary_user.phone,
        status=InviteStatus.ACCEPTED,
        payment_status=PlayerPaymentStatus.PENDENTE,
    )]
    if partner is not None and tournament.modality in TEAM_MODALITIES:
        players.append(PlayerEntry(
            profile_id=partner.id,
            member_id=None,
            name=partner.name,
            phone=partner.phone,
            status=InviteStatus.PENDING,
            payment_status=PlayerPaymentStatus.PENDENTE,
        ))

    fee = tournament.resolve_fee(category_id)
    active = [p for p in tournament.participants if p.category_id == category_id and not p.on_waitlist]
    on_waitlist = tournament.max_participants > 0 and len(active) >= tournament.max_participants
    return Participant(
        category_id=category_id,
        name=primary_user.name if tournament.modality == Modality.INDIVIDUAL else team_name.strip(),
        email=primary_user.email,
        players=players,
        on_waitlist=on_waitlist,
        payment_status=ParticipantPaymentStatus.PAGO if fee == 0 else ParticipantPaymentStatus.PENDENTE,
    )


async def admit(
    store: RecordStore,
    tournament: Tournament,
    category_id: str,
    team_name: str,
    primary_user: Optional[UserRef],
    partner: Optional[UserRef] = None,
    member: Optional[MemberCustomer] = None,
) -> AdmissionSuccess | Failure:
    """
    Register ``primary_user`` (and an invited partner) into a tournament category.

    ``member`` is the user's arena member record; while it has not synced the
    result is ``PROFILE_NOT_READY`` and the caller decides whether to poll.
    """
    try:
        tournament = await load_fresh_tournament(store, tournament)
    except Exception:  # noqa: BLE001
        logger.exception("Failed to load tournament=%s for admission", tournament.id)
        return Failure(error=ErrorCode.UNEXPECTED, message="Erro ao realizar inscrição.")
    try:
        validate_admission(tournament, category_id, team_name, primary_user, member)
    except ArenaPaymentsError as exc:
        logger.info("Admission rejected tournament=%s category=%s reason=%s", tournament.id, category_id, exc.code.value)
        return exc.to_failure()

    participant = build_participant(tournament, category_id, team_name, primary_user, member, partner)
    tournament.participants.append(participant)
    try:
        await store.upsert(Collection.TOURNAMENTS, [tournament.model_dump(mode="json")], tournament.arena_id)
    except Exception:  # noqa: BLE001
        logger.exception("Failed to store admission tournament=%s profile=%s", tournament.id, primary_user.id)
        return Failure(error=ErrorCode.UNEXPECTED, message="Erro ao realizar inscrição.")
    logger.info(
        "Admitted participant=%s tournament=%s category=%s players=%s waitlist=%s",
        participant.id,
        tournament.id,
        category_id,
        len(participant.players),
        participant.on_waitlist,
    )

    if len(participant.players) > 1:
        await send_tournament_invite(store, tournament, primary_user, partner)
    return AdmissionSuccess(participant=participant, tournament=tournament)
