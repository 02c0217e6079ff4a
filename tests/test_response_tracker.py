from responsescli.core.response_tracker import ResponseIdTracker


def make_tracker(tmp_path, **kwargs) -> ResponseIdTracker:
    return ResponseIdTracker(tmp_path / "LogIds.txt", **kwargs)


def test_add_appends_sets_cursor_and_persists_log(tmp_path):
    tracker = make_tracker(tmp_path)
    tracker.add("resp_1")
    tracker.add("resp_2")

    assert tracker.ids == ["resp_1", "resp_2"]
    assert tracker.last_id == "resp_2"
    assert (tmp_path / "LogIds.txt").read_text(encoding="utf-8") == "resp_1\nresp_2"


def test_add_ignores_blank_and_repeated_tail(tmp_path):
    tracker = make_tracker(tmp_path)
    tracker.add("resp_1")
    tracker.add("resp_1")
    tracker.add("")
    tracker.add("   ")
    tracker.add(None)

    assert tracker.ids == ["resp_1"]
    assert tracker.log_ids == "resp_1"


def test_log_has_no_duplicates_when_id_reappears(tmp_path):
    tracker = make_tracker(tmp_path)
    tracker.add("resp_1")
    tracker.add("resp_2")
    tracker.add("resp_1")

    assert tracker.ids == ["resp_1", "resp_2", "resp_1"]
    assert tracker.log_ids == "resp_1\nresp_2"


def test_cancel_moves_cursor_back_without_mutating_list(tmp_path):
    tracker = make_tracker(tmp_path)
    tracker.add("a")
    tracker.add("b")
    tracker.add("c")

    tracker.cancel()
    assert tracker.last_id == "b"
    assert tracker.ids == ["a", "b", "c"]

    # Cursor adjustment, not a pop: a second cancel lands on the same id
    tracker.cancel()
    assert tracker.last_id == "b"


def test_cancel_with_single_or_no_entry_empties_cursor(tmp_path):
    tracker = make_tracker(tmp_path)
    tracker.cancel()
    assert tracker.last_id == ""

    tracker.add("only")
    tracker.cancel()
    assert tracker.last_id == ""


def test_clear_calls_callback_and_keeps_log(tmp_path):
    deleted = []
    tracker = make_tracker(tmp_path, on_delete=deleted.append)
    tracker.add("a")
    tracker.add("b")

    tracker.clear()

    assert deleted == ["a", "b"]
    assert tracker.ids == []
    assert tracker.last_id == ""
    assert tracker.log_ids == "a\nb"


def test_cancel_after_clear_does_not_reach_previous_chain(tmp_path):
    tracker = make_tracker(tmp_path)
    tracker.add("a")
    tracker.add("b")

    tracker.clear()
    tracker.add("c")
    tracker.cancel()

    assert tracker.last_id == ""
    assert tracker.ids == ["c"]


def test_delete_invokes_callback_for_one_id(tmp_path):
    deleted = []
    tracker = make_tracker(tmp_path, on_delete=deleted.append)
    tracker.delete("x")
    assert deleted == ["x"]


def test_remove_id_only_touches_log(tmp_path):
    tracker = make_tracker(tmp_path)
    tracker.add("a")
    tracker.add("b")

    tracker.remove_id("a")
    tracker.remove_id("missing")

    assert tracker.ids == ["a", "b"]
    assert tracker.log_ids == "b"
    assert make_tracker(tmp_path).log_ids == "b"


def test_get_orphans_preserves_log_order(tmp_path):
    tracker = make_tracker(tmp_path)
    for response_id in ("r1", "r2", "r3", "r4"):
        tracker.add(response_id)

    assert tracker.get_orphans(["r3", "r1"]) == ["r2", "r4"]
    assert tracker.get_orphans([]) == ["r1", "r2", "r3", "r4"]


def test_log_is_reloaded_across_instances(tmp_path):
    make_tracker(tmp_path).add("r1")
    tracker = make_tracker(tmp_path)

    assert tracker.log_ids == "r1"
    # Active ids are session scoped
    assert tracker.ids == []
    assert tracker.last_id == ""


def test_missing_log_directory_is_created_on_write(tmp_path):
    tracker = ResponseIdTracker(tmp_path / "nested" / "dir" / "LogIds.txt")
    tracker.add("r1")
    assert (tmp_path / "nested" / "dir" / "LogIds.txt").exists()


def test_unreadable_log_yields_empty_log(tmp_path):
    log = tmp_path / "LogIds.txt"
    log.write_bytes(b"\xff\xfe\xfa invalid utf-8")

    tracker = ResponseIdTracker(log)

    assert tracker.log_ids == ""
