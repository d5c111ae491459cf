import pytest

from fakes import FakeCategory, FakeChannel, FakeMember, FakeRole
from utils.checks import InvocationCheckFailure, MissingMappingInput, RoleChannelNotFound, RoleUnavailable
from utils.reconciler import render_role_message
from utils.role_grants import ReactionEvent, ReactionEventType
from utils.role_store import RoleMessageReference


async def test_add_then_list(role_commands, store, guild):
    response = await role_commands.add_mapping(guild, '✅', 'Verified')

    assert response == 'Role mapping added: ✅ -> Verified'
    assert store.get(guild.id) == {'✅': 'Verified'}
    assert '✅ -> Verified' in role_commands.list_mappings(guild.id)


async def test_add_creates_role_once(role_commands, guild):
    await role_commands.add_mapping(guild, '✅', 'Verified')
    await role_commands.add_mapping(guild, '☑️', 'Verified')

    assert guild.created_roles == ['Verified']


async def test_add_uses_existing_role(role_commands, guild):
    guild.roles.append(FakeRole('Verified'))

    await role_commands.add_mapping(guild, '✅', 'Verified')

    assert guild.created_roles == []


async def test_add_strips_input(role_commands, store, guild):
    await role_commands.add_mapping(guild, ' ✅ ', '  Verified ')

    assert store.get(guild.id) == {'✅': 'Verified'}


@pytest.mark.parametrize('emoji,role_name', [('', 'Verified'), ('✅', '   ')])
async def test_add_rejects_blank_input(role_commands, store, guild, emoji, role_name):
    with pytest.raises(MissingMappingInput):
        await role_commands.add_mapping(guild, emoji, role_name)

    assert store.get(guild.id) == {}
    assert guild.created_roles == []


async def test_add_aborts_when_role_cannot_be_created(role_commands, store, guild):
    guild.fail_role_creation = True

    with pytest.raises(RoleUnavailable) as error:
        await role_commands.add_mapping(guild, '✅', 'Verified')

    assert 'Verified' in error.value.message
    assert store.get(guild.id) == {}


async def test_add_refreshes_role_message(role_commands, store, guild, channel):
    await role_commands.add_mapping(guild, '✅', 'Verified')
    await role_commands.designate_channel(guild, str(channel.id))
    message = next(iter(channel.messages.values()))

    await role_commands.add_mapping(guild, '🎮', 'Gamer')

    assert message.content == render_role_message({'✅': 'Verified', '🎮': 'Gamer'})
    assert [reaction.emoji for reaction in message.reactions] == ['✅', '🎮']


async def test_add_with_stale_role_message_still_saves(role_commands, store, guild, channel):
    await store.set_message_ref(guild.id, RoleMessageReference(channel_id=channel.id, message_id=404))

    await role_commands.add_mapping(guild, '✅', 'Verified')

    assert store.get(guild.id) == {'✅': 'Verified'}
    assert store.get_message_ref(guild.id) == RoleMessageReference(channel_id=channel.id, message_id=404)


async def test_remove(role_commands, store, guild, channel):
    await role_commands.add_mapping(guild, '✅', 'Verified')
    await role_commands.add_mapping(guild, '🎮', 'Gamer')
    await role_commands.designate_channel(guild, str(channel.id))
    message = next(iter(channel.messages.values()))

    response = await role_commands.remove_mapping(guild, '🎮')

    assert response == 'Role mapping removed for emoji: 🎮'
    assert store.get(guild.id) == {'✅': 'Verified'}
    assert message.content == render_role_message({'✅': 'Verified'})
    assert [reaction.emoji for reaction in message.reactions] == ['✅']


async def test_remove_missing_mapping(role_commands, guild):
    assert await role_commands.remove_mapping(guild, '✅') == 'Role mapping not found.'


def test_list_without_mappings(role_commands, guild):
    assert role_commands.list_mappings(guild.id) == 'No role mappings set up.'


async def test_list_in_insertion_order(role_commands, guild):
    await role_commands.add_mapping(guild, '🎮', 'Gamer')
    await role_commands.add_mapping(guild, '✅', 'Verified')

    assert role_commands.list_mappings(guild.id) == 'Current role mappings:\n🎮 -> Gamer\n✅ -> Verified'


async def test_designate_channel(role_commands, store, guild, channel):
    await role_commands.add_mapping(guild, '✅', 'Verified')
    await role_commands.add_mapping(guild, '🎮', 'Gamer')

    response = await role_commands.designate_channel(guild, str(channel.id))

    message = next(iter(channel.messages.values()))
    assert response == f'Role selection message created in <#{channel.id}>.'
    assert message.content == render_role_message({'✅': 'Verified', '🎮': 'Gamer'})
    assert [reaction.emoji for reaction in message.reactions] == ['✅', '🎮']
    assert store.get_message_ref(guild.id) == RoleMessageReference(channel_id=channel.id, message_id=message.id)


async def test_designate_channel_again_leaves_old_message(role_commands, store, guild, channel):
    await role_commands.add_mapping(guild, '✅', 'Verified')
    await role_commands.designate_channel(guild, str(channel.id))
    other = FakeChannel(11)
    guild.channels.append(other)

    await role_commands.designate_channel(guild, '11')

    old_message = next(iter(channel.messages.values()))
    new_message = next(iter(other.messages.values()))
    assert old_message.calls == [('add', '✅')]
    assert store.get_message_ref(guild.id) == RoleMessageReference(channel_id=11, message_id=new_message.id)


@pytest.mark.parametrize('channel_id', ['404', 'not a channel', '30'])
async def test_designate_unknown_channel(role_commands, store, guild, channel, channel_id):
    guild.channels.append(FakeCategory(30))
    await role_commands.add_mapping(guild, '✅', 'Verified')

    with pytest.raises(RoleChannelNotFound) as error:
        await role_commands.designate_channel(guild, channel_id)

    assert error.value.message == 'Channel not found. Please use a valid channel ID.'
    assert store.get_message_ref(guild.id) is None


async def test_designate_channel_without_mappings(role_commands, store, guild, channel):
    with pytest.raises(InvocationCheckFailure) as error:
        await role_commands.designate_channel(guild, str(channel.id))

    assert error.value.message == 'No role mappings set up. Use /addrole to add role mappings first.'
    assert channel.messages == {}
    assert store.get_message_ref(guild.id) is None


async def test_designate_channel_send_failure(role_commands, store, guild, channel):
    await role_commands.add_mapping(guild, '✅', 'Verified')
    channel.fail_sends = True

    with pytest.raises(InvocationCheckFailure):
        await role_commands.designate_channel(guild, str(channel.id))

    assert store.get_message_ref(guild.id) is None


async def test_designate_channel_tolerates_reaction_failures(role_commands, store, guild, channel, monkeypatch):
    await role_commands.add_mapping(guild, 'bad', 'Broken')
    await role_commands.add_mapping(guild, '✅', 'Verified')
    original_send = channel.send

    async def send(content):
        message = await original_send(content)
        message.failing_emoji = {'bad'}
        return message

    monkeypatch.setattr(channel, 'send', send)

    await role_commands.designate_channel(guild, str(channel.id))

    message = next(iter(channel.messages.values()))
    assert [reaction.emoji for reaction in message.reactions] == ['✅']
    assert store.get_message_ref(guild.id).message_id == message.id


async def test_full_flow(role_commands, grants, store, guild, channel):
    member = FakeMember(42, 'alice')
    guild.members[member.id] = member

    await role_commands.add_mapping(guild, '✅', 'Verified')
    await role_commands.designate_channel(guild, str(channel.id))
    message_id = store.get_message_ref(guild.id).message_id

    await grants.handle(ReactionEvent(ReactionEventType.ADD, guild.id, channel.id, message_id, '✅', member.id))
    assert [role.name for role in member.roles] == ['Verified']

    await grants.handle(ReactionEvent(ReactionEventType.REMOVE, guild.id, channel.id, message_id, '✅', member.id))
    assert member.roles == []
    assert member.direct_messages == [
        "You've been granted the Verified role!", "You've been removed from the Verified role."
    ]


async def test_animated_emoji_mapping_can_be_removed_by_either_form(role_commands, store, guild):
    response = await role_commands.add_mapping(guild, '<a:party:1234567890123456789>', 'Party')

    assert response == 'Role mapping added: <:party:1234567890123456789> -> Party'
    assert await role_commands.remove_mapping(guild, '<a:party:1234567890123456789>') == \
        'Role mapping removed for emoji: <:party:1234567890123456789>'
    assert store.get(guild.id) == {}
