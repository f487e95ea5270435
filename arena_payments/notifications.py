from arena_payments.config import Collection
from arena_payments.db import RecordStore
from arena_payments.logging_config import get_logger
from arena_payments.schemas.domain import Notification, Tournament, UserRef

logger = get_logger(__name__)

TOURNAMENT_INVITE = "tournament_invite"


async def send_tournament_invite(
    store: RecordStore,
    tournament: Tournament,
    inviter: UserRef,
    partner: UserRef,
) -> Notification | None:
    """
    Best-effort invite to the partner; a delivery failure is logged and swallowed.
    """
    notification = Notification(
        profile_id=partner.id,
        arena_id=tournament.arena_id,
        message=f'{inviter.name} convidou você para o torneio "{tournament.name}".',
        type=TOURNAMENT_INVITE,
        link_to="/perfil",
        sender_id=inviter.id,
        sender_name=inviter.name,
        sender_avatar_url=inviter.avatar_url,
    )
    try:
        await store.upsert(Collection.NOTIFICATIONS, [notification.model_dump(mode="json")], tournament.arena_id)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Invite notification failed: tournament=%s partner=%s error=%s",
            tournament.id,
            partner.id,
            exc,
        )
        return None
    logger.info("Invite sent: tournament=%s partner=%s sender=%s", tournament.id, partner.id, inviter.id)
    return notification
