from rolebot import VERSION, generate_error_event


def test_error_event_carries_traceback_and_service():
    try:
        raise ValueError('role data unavailable')
    except ValueError as e:
        request = generate_error_event(e, 'rolebot-project')

    assert request.project_name == 'rolebot-project'
    assert 'ValueError: role data unavailable' in request.event.message
    assert request.event.service_context.service == 'RoleBot'
    assert request.event.service_context.version == VERSION
