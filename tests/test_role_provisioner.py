from fakes import FakeRole


async def test_find_role_by_exact_name(guild, provisioner):
    role = FakeRole('Verified')
    guild.roles.append(role)

    assert provisioner.find_role(guild, 'Verified') is role
    assert provisioner.find_role(guild, 'verified') is None


async def test_first_match_wins(guild, provisioner):
    first, second = FakeRole('Verified'), FakeRole('Verified')
    guild.roles.extend([first, second])

    assert provisioner.find_role(guild, 'Verified') is first


async def test_ensure_role_returns_existing_role(guild, provisioner):
    role = FakeRole('Verified')
    guild.roles.append(role)

    assert await provisioner.ensure_role(guild, 'Verified') is role
    assert guild.created_roles == []


async def test_ensure_role_creates_missing_role(guild, provisioner):
    role = await provisioner.ensure_role(guild, 'Verified')

    assert role.name == 'Verified'
    assert role in guild.roles
    assert guild.created_roles == ['Verified']
    assert await provisioner.ensure_role(guild, 'Verified') is role
