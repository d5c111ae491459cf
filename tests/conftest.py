import pytest

from fakes import FakeChannel, FakeClient, FakeGuild, GUILD_ID, CHANNEL_ID
from utils.reconciler import MessageReconciler
from utils.role_commands import RoleMappingCommands
from utils.role_grants import RoleGrantService
from utils.role_provisioner import RoleProvisioner
from utils.role_store import RoleStore


@pytest.fixture
def guild() -> FakeGuild:
    return FakeGuild(GUILD_ID)


@pytest.fixture
def channel(guild: FakeGuild) -> FakeChannel:
    channel = FakeChannel(CHANNEL_ID)
    guild.channels.append(channel)
    return channel


@pytest.fixture
def client(guild: FakeGuild, channel: FakeChannel) -> FakeClient:
    client = FakeClient()
    client.guilds[guild.id] = guild
    client.channels[channel.id] = channel
    return client


@pytest.fixture
def store(tmp_path) -> RoleStore:
    return RoleStore(str(tmp_path / 'role_data.json'))


@pytest.fixture
def provisioner() -> RoleProvisioner:
    return RoleProvisioner()


@pytest.fixture
def reconciler(client: FakeClient) -> MessageReconciler:
    return MessageReconciler(client)  # type: ignore[arg-type]


@pytest.fixture
def grants(client: FakeClient, store: RoleStore, provisioner: RoleProvisioner) -> RoleGrantService:
    return RoleGrantService(client, store, provisioner)  # type: ignore[arg-type]


@pytest.fixture
def role_commands(store: RoleStore, provisioner: RoleProvisioner, reconciler: MessageReconciler) -> RoleMappingCommands:
    return RoleMappingCommands(store, provisioner, reconciler)
