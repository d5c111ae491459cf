import discord

from fakes import FakeMessage, FakeCategory
from utils.reconciler import ReactionAction, ReactionOutcome, render_role_message, ROLE_MESSAGE_HEADER
from utils.role_store import RoleMessageReference


def posted_message(channel, content: str = '') -> FakeMessage:
    message = FakeMessage(20, channel, content)
    channel.messages[message.id] = message
    return message


def test_render_lists_entries_in_insertion_order():
    rendered = render_role_message({'🎮': 'Gamer', '✅': 'Verified'})

    assert rendered == f'{ROLE_MESSAGE_HEADER}\n\n🎮 - Gamer\n✅ - Verified'


def test_render_empty_mapping_is_header_only():
    assert render_role_message({}) == f'{ROLE_MESSAGE_HEADER}\n'


async def test_reconcile_edits_body_and_adds_missing_reaction(channel, reconciler):
    message = posted_message(channel)

    outcomes = await reconciler.reconcile(message, {'✅': 'Verified'})

    assert '✅ - Verified' in message.content
    assert [reaction.emoji for reaction in message.reactions] == ['✅']
    assert outcomes == [ReactionOutcome('✅', ReactionAction.ADD, True)]


async def test_reconcile_diff(channel, reconciler):
    message = posted_message(channel)
    for emoji in ('A', 'B', 'C'):
        message.react(emoji, me=True)

    await reconciler.reconcile(message, {'B': 'Bee', 'C': 'Sea', 'D': 'Dee'})

    reaction_calls = [call for call in message.calls if call[0] != 'edit']
    assert reaction_calls == [('remove', 'A'), ('add', 'D')]
    assert {reaction.emoji for reaction in message.reactions} == {'B', 'C', 'D'}


async def test_reconcile_is_idempotent(channel, reconciler):
    message = posted_message(channel)
    message.react('A', me=True)
    mapping = {'B': 'Bee', 'C': 'Sea'}

    await reconciler.reconcile(message, mapping)
    message.calls.clear()

    outcomes = await reconciler.reconcile(message, mapping)

    assert outcomes == []
    assert message.calls == []


async def test_reconcile_leaves_other_users_reactions(channel, reconciler):
    message = posted_message(channel)
    message.react('🍕', me=False)

    outcomes = await reconciler.reconcile(message, {'✅': 'Verified'})

    assert ('remove', '🍕') not in message.calls
    assert '🍕' in {reaction.emoji for reaction in message.reactions}
    assert [outcome.emoji for outcome in outcomes] == ['✅']


async def test_reconcile_does_not_re_add_reactions_other_users_already_made(channel, reconciler):
    message = posted_message(channel)
    message.react('✅', me=False)

    await reconciler.reconcile(message, {'✅': 'Verified'})

    assert ('add', '✅') not in message.calls


async def test_reconcile_failures_are_isolated(channel, reconciler):
    message = posted_message(channel)
    message.react('old', me=True)
    message.react('stuck', me=True)
    message.failing_emoji = {'stuck', 'bad'}

    outcomes = await reconciler.reconcile(message, {'bad': 'Broken', '✅': 'Verified', '🎮': 'Gamer'})

    assert {(outcome.emoji, outcome.action, outcome.succeeded) for outcome in outcomes} == {
        ('old', ReactionAction.REMOVE, True),
        ('stuck', ReactionAction.REMOVE, False),
        ('bad', ReactionAction.ADD, False),
        ('✅', ReactionAction.ADD, True),
        ('🎮', ReactionAction.ADD, True),
    }
    assert all(outcome.error for outcome in outcomes if not outcome.succeeded)
    assert {reaction.emoji for reaction in message.reactions} == {'stuck', '✅', '🎮'}


async def test_reconcile_stops_when_message_was_deleted(channel, reconciler):
    message = posted_message(channel)
    message.deleted = True

    outcomes = await reconciler.reconcile(message, {'✅': 'Verified'})

    assert outcomes == []
    assert message.calls == [('edit',)]


async def test_add_reactions_attempts_every_emoji(channel, reconciler):
    message = posted_message(channel)
    message.failing_emoji = {'bad'}

    outcomes = await reconciler.add_reactions(message, ['bad', '✅'])

    assert [(outcome.emoji, outcome.succeeded) for outcome in outcomes] == [('bad', False), ('✅', True)]
    assert [reaction.emoji for reaction in message.reactions] == ['✅']


async def test_fetch_message(channel, reconciler):
    message = posted_message(channel)

    assert await reconciler.fetch_message(RoleMessageReference(channel_id=channel.id, message_id=message.id)) is message


async def test_fetch_message_with_stale_reference(channel, reconciler, client):
    assert await reconciler.fetch_message(RoleMessageReference(channel_id=channel.id, message_id=404)) is None
    assert await reconciler.fetch_message(RoleMessageReference(channel_id=404, message_id=20)) is None

    client.channels[30] = FakeCategory(30)
    assert await reconciler.fetch_message(RoleMessageReference(channel_id=30, message_id=20)) is None


async def test_reconcile_matches_animated_reactions_by_id(channel, reconciler):
    token = '<:party:1234567890123456789>'
    message = posted_message(channel, render_role_message({token: 'Party'}))
    message.react(discord.PartialEmoji(name='party', id=1234567890123456789, animated=True), me=True)

    outcomes = await reconciler.reconcile(message, {token: 'Party'})

    assert outcomes == []
    assert message.calls == []
