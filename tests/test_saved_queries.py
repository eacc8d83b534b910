from pathling_connect.codec import Aggregation
from pathling_connect.workbench import (
    ChangeSaveName,
    ClearQuery,
    DeleteSavedQuery,
    OpenSaveDialog,
    add_aggregation,
    create_store,
    load_saved_query,
    save_query,
)


def test_save_from_dialog_and_load():
    store = create_store()
    store.dispatch(add_aggregation("count()", "Patients"))
    store.dispatch(OpenSaveDialog())
    store.dispatch(ChangeSaveName("Patient count"))

    saved = store.dispatch(save_query())

    assert saved.name == "Patient count"
    assert store.get_state()["saved"].queries == (saved,)
    assert store.get_state()["save_dialog"].is_open is False

    store.dispatch(ClearQuery())
    assert store.get_state()["query"].aggregations == ()

    store.dispatch(load_saved_query(saved.id))
    assert store.get_state()["query"].aggregations == (
        Aggregation(expression="count()", label="Patients"),
    )


def test_blank_name_is_rejected():
    store = create_store()
    store.dispatch(add_aggregation("count()"))

    assert store.dispatch(save_query("   ")) is None
    assert store.get_state()["saved"].queries == ()
    assert store.get_state()["error"].message == "Saved query must have a name."


def test_unknown_saved_query():
    store = create_store()

    assert store.dispatch(load_saved_query("missing")) is None
    assert store.get_state()["error"].message == "No saved query with id missing."


def test_delete_saved_query():
    store = create_store()
    first = store.dispatch(save_query("First"))
    second = store.dispatch(save_query("Second"))

    store.dispatch(DeleteSavedQuery(first.id))

    assert store.get_state()["saved"].queries == (second,)
