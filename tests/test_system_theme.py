from budgetpunk.services.system_theme import StaticColorSchemeSignal


def test_static_signal_notifies_only_on_change():
    signal = StaticColorSchemeSignal(matches=False)
    seen = []
    signal.add_listener(seen.append)
    signal.set_matches(False)
    signal.set_matches(True)
    signal.set_matches(True)
    assert seen == [True]
    assert signal.matches is True


def test_remove_listener_is_tolerant():
    signal = StaticColorSchemeSignal()
    seen = []
    signal.add_listener(seen.append)
    signal.remove_listener(seen.append)
    signal.remove_listener(seen.append)
    signal.set_matches(True)
    assert seen == []
    assert signal.listener_count == 0
