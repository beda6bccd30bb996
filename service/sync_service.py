from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple
from core.account import build_account
from core.handler_client import HandlerServiceClient
from core.exceptions import FatalSyncError, XrayAPIError
from core.logging_config import LoggerMixin
from core.types import NodeID, ProxyProtocol, UserID
from config.app_config import XrayConfig
from data.models import UserModel
from data.user_repository import UserRepository

@dataclass
class SyncResult:
    added: int = 0
    deleted: int = 0

class ProvisionedUsers:
    """
    Users this process has added to the inbound, in insertion order.

    Owned by the single running cycle; never persisted, so a restart starts
    empty and the first sync re-adds everyone.
    """

    def __init__(self) -> None:
        self._users: Dict[UserID, UserModel] = {}

    def __contains__(self, user: UserModel) -> bool:
        return self._users.get(user.id) == user

    def __iter__(self) -> Iterator[UserModel]:
        return iter(list(self._users.values()))

    def __len__(self) -> int:
        return len(self._users)

    def add(self, user: UserModel) -> None:
        self._users[user.id] = user

    def discard(self, user: UserModel) -> None:
        if user in self:
            del self._users[user.id]

def diff_users(provisioned: ProvisionedUsers, authoritative: List[UserModel]) -> Tuple[List[UserModel], List[UserModel]]:
    """
    Returns (additions, removals) by full-record equality.

    There is no update path: a user whose port, credential or email changed
    comes back as one removal of the old record plus one addition of the new.
    """
    wanted: Dict[UserID, UserModel] = {}
    for user in authoritative:
        wanted.setdefault(user.id, user)

    additions = [user for user in wanted.values() if user not in provisioned]
    removals = [user for user in provisioned if wanted.get(user.id) != user]
    return additions, removals

class UserSyncService(LoggerMixin):
    def __init__(self, user_repo: UserRepository, handler_client: HandlerServiceClient,
                 protocol: ProxyProtocol, xray_config: XrayConfig,
                 ignore_empty_vmess_id: bool = False):
        self.user_repo = user_repo
        self.handler_client = handler_client
        self.protocol = protocol
        self.xray_config = xray_config
        self.ignore_empty_vmess_id = ignore_empty_vmess_id

    def sync(self, node_id: NodeID, provisioned: ProvisionedUsers, result: Optional[SyncResult] = None) -> SyncResult:
        result = result if result is not None else SyncResult()
        users = self.user_repo.get_all_users(node_id)
        if not users:
            # An empty list means the panel is not populated yet, not "remove everyone".
            return result

        additions, removals = diff_users(provisioned, users)

        for user in removals:
            self.handler_client.remove_user(user.email)
            provisioned.discard(user)
            result.deleted += 1
            self.logger.debug("Deleted user", id=user.id, vmess_id=user.vmess_id, email=user.email)

        for user in additions:
            try:
                self.handler_client.add_user(self._account(user))
            except XrayAPIError as e:
                if self.ignore_empty_vmess_id:
                    self.logger.warning("Add user failed", error=str(e), id=user.id, email=user.email)
                    continue
                raise FatalSyncError(f"add user {user.email} (id={user.id}) failed: {e}") from e
            provisioned.add(user)
            result.added += 1
            self.logger.debug("Added user", id=user.id, vmess_id=user.vmess_id, email=user.email)

        return result

    def _account(self, user: UserModel) -> dict:
        return build_account(
            user,
            self.protocol,
            level=self.xray_config.level,
            alter_id=self.xray_config.alter_id,
            security=self.xray_config.security
        )
