from budgetpunk.bindings.content_loading import ContentLoadingBinding, QueryStatus
from budgetpunk.stores.overlay_store import OverlayScope

C = OverlayScope.CONTENT


def test_loading_query_shows_content_indicator(overlay):
    binding = ContentLoadingBinding(overlay, message="Loading accounts")
    binding.update(QueryStatus(is_loading=True))
    assert overlay.snapshot(C).visible
    assert overlay.snapshot(C).message == "Loading accounts"
    binding.update(QueryStatus(is_loading=True))
    assert overlay.state.content.active_count == 1
    binding.update(QueryStatus())
    assert not overlay.snapshot(C).visible


def test_any_of_several_queries(overlay):
    binding = ContentLoadingBinding(overlay)
    binding.update([QueryStatus(), QueryStatus(is_fetching=True)])
    assert binding.owns_show
    binding.update([QueryStatus(), QueryStatus()])
    assert not binding.owns_show


def test_error_hides_indicator(overlay):
    binding = ContentLoadingBinding(overlay)
    binding.update(QueryStatus(is_loading=True))
    binding.update([QueryStatus(is_loading=True), QueryStatus(error=ValueError("bad"))])
    assert not overlay.snapshot(C).visible


def test_disabled_binding_never_shows(overlay):
    binding = ContentLoadingBinding(overlay, enabled=False)
    binding.set_loading(True)
    assert not overlay.snapshot(C).visible


def test_dispose_releases_owned_show(overlay):
    binding = ContentLoadingBinding(overlay)
    binding.set_loading(True)
    overlay.show(C, "other")
    binding.dispose()
    binding.dispose()
    assert overlay.state.content.active_count == 1
