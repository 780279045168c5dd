from advisorchat.llm.payload import RequestBuilder, memory_summary, serialize
from advisorchat.memory.simple import ConversationStore, Message


def make_store() -> ConversationStore:
    return ConversationStore("system policy")


def test_build_without_memory_is_history():
    store = make_store()
    store.append_user("Hello")

    messages = RequestBuilder().build(store)

    assert messages == store.history


def test_memory_clause_uses_last_five_questions():
    store = make_store()
    store.memory.user_name = "Ava"
    for index in range(1, 26):
        store.record_question(f"Q{index}")

    messages = RequestBuilder().build(store)

    assert messages[1] == Message(
        role="system",
        content="Conversation memory: user_name: Ava; recent_user_questions: Q21 | Q22 | Q23 | Q24 | Q25",
    )


def test_memory_clause_with_name_only():
    store = make_store()
    store.record_name("Ava")

    assert memory_summary(store.memory) == "Conversation memory: user_name: Ava"


def test_memory_clause_with_questions_only():
    store = make_store()
    store.record_question("Best toner?")

    assert memory_summary(store.memory) == "Conversation memory: recent_user_questions: Best toner?"


def test_build_does_not_mutate_store():
    store = make_store()
    store.record_name("Ava")
    store.append_user("Best toner?")
    store.record_question("Best toner?")
    before = store.history

    messages = RequestBuilder().build(store)

    assert store.history == before
    assert len(messages) == len(before) + 1
    assert [m.role for m in messages] == ["system", "system", "assistant", "user"]
    assert messages[2:] == before[1:]


def test_build_is_idempotent():
    store = make_store()
    store.memory.user_name = "Ava"
    store.append_user("Best toner?")
    store.record_question("Best toner?")
    builder = RequestBuilder()

    assert serialize(builder.build(store)) == serialize(builder.build(store))


def test_summary_window_is_configurable():
    store = make_store()
    for question in ("a", "b", "c"):
        store.record_question(question)

    messages = RequestBuilder(summary_window=2).build(store)

    assert messages[1].content == "Conversation memory: recent_user_questions: b | c"
