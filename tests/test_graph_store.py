import pytest

from conftest import publication_data

from turtlegraph.errors import (
    CardinalityViolation,
    DuplicateId,
    EndpointTypeMismatch,
    GraphError,
    MissingEndpoint,
    MissingRequiredProperty,
    PropertyTypeMismatch,
    UnknownProperty,
    UnknownType,
)
from turtlegraph.events.event_bus import EdgeUpdate, GraphEvent, NodeUpdate
from turtlegraph.graph.graph_schema import Edge, Node
from turtlegraph.graph.graph_store import GraphStore
from turtlegraph.graph.schema_registry import FieldKind


def _author(store, first="Carol", last="Smith"):
    return store.create_node("author", {"firstName": first, "lastName": last})


def _publication(store, **overrides):
    return store.create_node("publication", publication_data(**overrides))


def _member(store, name="Alice"):
    return store.create_node("member", {"firstName": name, "isActive": True})


# -------------------- Nodes --------------------


def test_create_node_assigns_id_and_equal_timestamps(store):
    node = _author(store)

    assert node.id
    assert node.created_at == node.updated_at
    fetched = store.get_node(node.id)
    assert fetched == node
    assert store.node_count() == 1


def test_created_ids_are_unique(store):
    ids = {_author(store, first=str(i)).id for i in range(20)}
    assert len(ids) == 20


def test_add_node_rejects_duplicate_id(store):
    node = Node.create("author", {"firstName": "A", "lastName": "B"})
    store.add_node(node)
    with pytest.raises(DuplicateId):
        store.add_node(node)
    assert store.node_count() == 1


def test_add_node_rejects_unknown_type(store, recorder):
    with pytest.raises(UnknownType):
        store.create_node("editor", {})
    assert store.get_nodes() == []
    assert recorder.events == []


def test_missing_required_property_leaves_store_unchanged(store, recorder):
    _author(store)
    with pytest.raises(MissingRequiredProperty):
        store.create_node("author", {"firstName": "Dave"})
    assert store.node_count() == 1
    assert recorder.kinds() == [GraphEvent.NODE_ADDED]


def test_extra_property_leaves_store_unchanged(store):
    before = store.get_nodes()
    with pytest.raises(UnknownProperty):
        store.create_node(
            "author", {"firstName": "Dave", "lastName": "Jones", "age": 40}
        )
    assert store.get_nodes() == before


def test_property_kind_mismatch(store):
    with pytest.raises(PropertyTypeMismatch):
        _publication(store, pages="twelve")
    with pytest.raises(PropertyTypeMismatch):
        _publication(store, published=1)


def test_store_without_schema_accepts_anything():
    store = GraphStore()
    node = store.create_node("anything", {"free": ["form"]})
    other = store.create_node("other")
    edge = store.create_edge("links", node.id, other.id, {"weight": 0.5})
    assert store.edge_count() == 1
    assert store.get_edge(edge.id).data == {"weight": 0.5}


def test_update_node_merges_data_and_keeps_identity(store, recorder):
    node = _author(store)
    updated = store.update_node(
        node.id,
        {"id": "other", "type": "member", "data": {"lastName": "Jones"}, "updated_at": "later"},
    )

    assert updated.id == node.id
    assert updated.type == "author"
    assert updated.data == {"firstName": "Carol", "lastName": "Jones"}
    assert updated.updated_at == "later"
    assert updated.created_at == node.created_at

    kind, payload = recorder.events[-1]
    assert kind is GraphEvent.NODE_UPDATED
    assert isinstance(payload, NodeUpdate)
    assert payload.node == updated
    assert payload.changes["data"] == {"lastName": "Jones"}


def test_update_missing_node_is_a_silent_noop(store, recorder):
    assert store.update_node("missing", {"data": {"x": 1}}) is None
    assert recorder.events == []


def test_update_node_is_validated_against_schema(store):
    node = _author(store)
    with pytest.raises(UnknownProperty):
        store.update_node(node.id, {"data": {"age": 3}})
    with pytest.raises(PropertyTypeMismatch):
        store.update_node(node.id, {"data": {"lastName": 3}})
    assert store.get_node(node.id).data == {"firstName": "Carol", "lastName": "Smith"}


def test_update_node_rejects_unknown_top_level_field(store):
    node = _author(store)
    with pytest.raises(UnknownProperty):
        store.update_node(node.id, {"colour": "green"})


def test_delete_missing_node_is_a_silent_noop(store, recorder):
    assert store.delete_node("missing") is False
    assert recorder.events == []


# -------------------- Edges --------------------


def test_add_edge_between_matching_types(store, recorder):
    author = _author(store)
    pub = _publication(store)
    edge = store.create_edge("wrote", author.id, pub.id)

    assert store.get_edges() == [edge]
    assert store.neighbors(author.id) == [pub.id]
    assert store.predecessors(pub.id) == [author.id]
    assert recorder.kinds()[-1] is GraphEvent.EDGE_ADDED


def test_add_edge_rejects_duplicate_id(store):
    author = _author(store)
    pub = _publication(store)
    edge = store.create_edge("wrote", author.id, pub.id)
    with pytest.raises(DuplicateId):
        store.add_edge(edge)


def test_add_edge_rejects_missing_endpoint(store, recorder):
    author = _author(store)
    with pytest.raises(MissingEndpoint) as exc:
        store.create_edge("wrote", author.id, "ghost")
    assert exc.value.missing == ["ghost"]
    assert store.edge_count() == 0
    assert recorder.kinds() == [GraphEvent.NODE_ADDED]


def test_missing_endpoint_is_checked_without_schema():
    store = GraphStore()
    node = store.create_node("n")
    with pytest.raises(MissingEndpoint):
        store.create_edge("e", "ghost", node.id)


def test_add_edge_rejects_unknown_type(store):
    author = _author(store)
    pub = _publication(store)
    with pytest.raises(UnknownType):
        store.create_edge("reviewed", author.id, pub.id)


def test_add_edge_rejects_wrong_endpoint_type(store):
    member = _member(store)
    pub = _publication(store)
    with pytest.raises(EndpointTypeMismatch):
        store.create_edge("wrote", member.id, pub.id)
    assert store.edge_count() == 0


def test_edge_data_is_validated(store):
    a = _member(store, "A")
    b = _member(store, "B")
    with pytest.raises(MissingRequiredProperty):
        store.create_edge("mentors", a.id, b.id, {})
    with pytest.raises(UnknownProperty):
        store.create_edge("wrote", _author(store).id, _publication(store).id, {"x": 1})


def test_single_valued_source_allows_only_one_edge(store):
    a = _member(store, "A")
    b = _member(store, "B")
    c = _member(store, "C")

    store.create_edge("mentors", a.id, b.id, {"since": 2020})
    with pytest.raises(CardinalityViolation) as exc:
        store.create_edge("mentors", a.id, c.id, {"since": 2021})

    assert exc.value.side == "source"
    assert exc.value.node_id == a.id
    assert store.edge_count() == 1


def test_single_valued_target_allows_only_one_incoming_edge(store):
    carol = _author(store, "Carol")
    dave = _author(store, "Dave")
    pub = _publication(store)

    store.create_edge("wrote", carol.id, pub.id)
    with pytest.raises(CardinalityViolation) as exc:
        store.create_edge("wrote", dave.id, pub.id)
    assert exc.value.side == "target"
    assert store.edge_count() == 1


def test_multiple_source_allows_many_edges(store):
    carol = _author(store)
    for i in range(3):
        store.create_edge("wrote", carol.id, _publication(store, title=f"P{i}").id)
    assert store.edge_count() == 3
    assert len(store.edges_of(carol.id)) == 3


def test_failed_add_edge_leaves_store_unchanged(store, recorder):
    a = _member(store, "A")
    b = _member(store, "B")
    store.create_edge("mentors", a.id, b.id, {"since": 2020})
    nodes, edges = store.get_nodes(), store.get_edges()
    seen = len(recorder.events)

    for bad in (
        Edge.create("mentors", a.id, b.id, {"since": "2020"}),
        Edge.create("mentors", a.id, "ghost", {"since": 1}),
        Edge.create("mentors", a.id, b.id, {"since": 1}),
    ):
        with pytest.raises(GraphError):
            store.add_edge(bad)

    assert store.get_nodes() == nodes
    assert store.get_edges() == edges
    assert len(recorder.events) == seen


def test_update_edge_merges_data(store, recorder):
    a = _member(store, "A")
    b = _member(store, "B")
    edge = store.create_edge("mentors", a.id, b.id, {"since": 2020})

    updated = store.update_edge(edge.id, {"data": {"since": 2022}, "type": "wrote"})
    assert updated.type == "mentors"
    assert updated.data == {"since": 2022}

    kind, payload = recorder.events[-1]
    assert kind is GraphEvent.EDGE_UPDATED
    assert isinstance(payload, EdgeUpdate)
    assert payload.edge.id == edge.id


def test_update_edge_endpoints_rechecks_cardinality(store):
    a = _member(store, "A")
    b = _member(store, "B")
    c = _member(store, "C")
    d = _member(store, "D")
    first = store.create_edge("mentors", a.id, b.id, {"since": 1})
    second = store.create_edge("mentors", c.id, d.id, {"since": 2})

    with pytest.raises(CardinalityViolation):
        store.update_edge(second.id, {"target_node_id": b.id})

    moved = store.update_edge(first.id, {"target_node_id": c.id})
    assert moved.target_node_id == c.id
    assert store.neighbors(a.id) == [c.id]
    assert store.predecessors(b.id) == []


def test_update_and_delete_missing_edge_are_noops(store, recorder):
    assert store.update_edge("missing", {"data": {}}) is None
    assert store.delete_edge("missing") is False
    assert recorder.events == []


def test_delete_edge_does_not_cascade(store, recorder):
    author = _author(store)
    pub = _publication(store)
    edge = store.create_edge("wrote", author.id, pub.id)

    assert store.delete_edge(edge.id) is True
    assert store.node_count() == 2
    assert store.edge_count() == 0
    assert recorder.events[-1] == (GraphEvent.EDGE_DELETED, edge.id)


# -------------------- Cascade --------------------


def test_delete_node_cascades_incident_edges_before_node_event(store, recorder):
    carol = _author(store, "Carol")
    dave = _author(store, "Dave")
    pubs = [_publication(store, title=f"P{i}") for i in range(3)]
    carol_edges = [store.create_edge("wrote", carol.id, p.id) for p in pubs[:2]]
    dave_edge = store.create_edge("wrote", dave.id, pubs[2].id)
    recorder.events.clear()

    assert store.delete_node(carol.id) is True

    assert recorder.events == [
        (GraphEvent.EDGE_DELETED, carol_edges[0].id),
        (GraphEvent.EDGE_DELETED, carol_edges[1].id),
        (GraphEvent.NODE_DELETED, carol.id),
    ]
    assert store.get_edges() == [dave_edge]
    assert not store.has_node(carol.id)


def test_cascade_listener_sees_node_already_removed(store):
    carol = _author(store)
    pub = _publication(store)
    store.create_edge("wrote", carol.id, pub.id)
    observed = []

    def on_edge_deleted(edge_id):
        observed.append((store.has_node(carol.id), store.edge_count()))

    store.on(GraphEvent.EDGE_DELETED, on_edge_deleted)
    store.delete_node(carol.id)

    assert observed == [(False, 0)]


def test_self_loop_is_cascaded_once(schema):
    schema["edge_types"]["cites"] = {
        "name": "cites",
        "description": "",
        "source": {"node_type": "publication", "multiple": True},
        "target": {"node_type": "publication", "multiple": True},
    }
    store = GraphStore(schema)
    pub = store.create_node("publication", publication_data())
    loop = store.create_edge("cites", pub.id, pub.id)
    deleted = []
    store.on(GraphEvent.EDGE_DELETED, deleted.append)

    store.delete_node(pub.id)
    assert deleted == [loop.id]


def _author_with_publications(store, count=3):
    carol = _author(store)
    edges = [
        store.create_edge("wrote", carol.id, _publication(store, title=f"P{i}").id)
        for i in range(count)
    ]
    return carol, edges


def test_cascade_listener_deleting_later_incident_edge(store, recorder):
    carol, edges = _author_with_publications(store)
    results = []

    def on_edge_deleted(edge_id):
        if edge_id == edges[0].id:
            results.append(store.delete_edge(edges[1].id))

    store.on(GraphEvent.EDGE_DELETED, on_edge_deleted)
    recorder.events.clear()

    assert store.delete_node(carol.id) is True

    assert results == [False]
    assert recorder.events == [
        (GraphEvent.EDGE_DELETED, edges[0].id),
        (GraphEvent.EDGE_DELETED, edges[1].id),
        (GraphEvent.EDGE_DELETED, edges[2].id),
        (GraphEvent.NODE_DELETED, carol.id),
    ]
    assert store.get_edges() == []
    assert store.node_count() == 3


def test_cascade_listener_updating_later_incident_edge(store):
    carol, edges = _author_with_publications(store, count=2)
    results = []

    def on_edge_deleted(edge_id):
        if edge_id == edges[0].id:
            results.append(store.update_edge(edges[1].id, {"updated_at": "later"}))

    store.on(GraphEvent.EDGE_DELETED, on_edge_deleted)
    store.delete_node(carol.id)

    assert results == [None]
    assert store.get_edges() == []


def test_cascade_listener_sees_every_incident_edge_gone(store):
    carol, edges = _author_with_publications(store)
    observed = []

    def on_edge_deleted(edge_id):
        observed.append(
            (store.has_node(carol.id), [store.has_edge(e.id) for e in edges])
        )

    store.on(GraphEvent.EDGE_DELETED, on_edge_deleted)
    store.delete_node(carol.id)

    assert observed == [(False, [False, False, False])] * 3


def test_raising_cascade_listener_leaves_no_dangling_edges(store, recorder):
    carol, edges = _author_with_publications(store)
    dave = _author(store, "Dave")
    other = store.create_edge("wrote", dave.id, _publication(store, title="Other").id)

    def on_edge_deleted(edge_id):
        raise RuntimeError("listener failed")

    store.on(GraphEvent.EDGE_DELETED, on_edge_deleted)
    recorder.events.clear()

    with pytest.raises(RuntimeError):
        store.delete_node(carol.id)

    assert not store.has_node(carol.id)
    assert store.get_edges() == [other]
    node_ids = {n.id for n in store.get_nodes()}
    for edge in store.get_edges():
        assert edge.source_node_id in node_ids
        assert edge.target_node_id in node_ids
    # delivery stops at the failing listener
    assert recorder.events == [(GraphEvent.EDGE_DELETED, edges[0].id)]


# -------------------- Snapshots and clear --------------------


def test_returned_collections_are_snapshots(store):
    author = _author(store)
    nodes = store.get_nodes()
    nodes.clear()
    assert store.node_count() == 1

    snapshot = store.get_node(author.id)
    snapshot.data["firstName"] = "Mallory"
    assert store.get_node(author.id).data["firstName"] == "Carol"


def test_inserted_node_is_detached_from_caller(store):
    data = {"firstName": "Carol", "lastName": "Smith"}
    node = Node.create("author", data)
    store.add_node(node)
    node.data["firstName"] = "Mallory"
    assert store.get_node(node.id).data["firstName"] == "Carol"


def test_clear_emits_single_event(store, recorder):
    author = _author(store)
    store.create_edge("wrote", author.id, _publication(store).id)
    recorder.events.clear()

    store.clear()

    assert recorder.events == [(GraphEvent.GRAPH_CLEARED, None)]
    assert store.get_nodes() == []
    assert store.get_edges() == []


# -------------------- Export --------------------


def test_facts_are_flat_records(store):
    author = _author(store)
    pub = _publication(store)
    edge = store.create_edge("wrote", author.id, pub.id)

    facts = store.facts()
    assert facts[0]["id"] == author.id
    assert facts[0]["firstName"] == "Carol"
    assert facts[1]["tags"] == ["graphs", "databases"]
    assert facts[2] == {
        "id": edge.id,
        "type": "wrote",
        "source_node_id": author.id,
        "target_node_id": pub.id,
        "created_at": edge.created_at,
        "updated_at": edge.updated_at,
    }


def test_render_facts_requires_schema():
    with pytest.raises(GraphError):
        GraphStore().render_facts()


def test_to_dict_round_trips_through_from_dict(store):
    author = _author(store)
    document = store.to_dict()
    assert Node.from_dict(document["nodes"][0]) == author


# -------------------- Schema --------------------


def test_schema_exposed_by_store_cannot_change_validation(store):
    store.schema.node_types["author"].data["nickname"] = FieldKind.STRING
    del store.schema.edge_types["wrote"]

    assert "wrote" in store.schema.edge_types
    with pytest.raises(UnknownProperty):
        store.create_node(
            "author", {"firstName": "Carol", "lastName": "Smith", "nickname": "c"}
        )
    carol = _author(store)
    store.create_edge("wrote", carol.id, _publication(store).id)
    assert store.edge_count() == 1
