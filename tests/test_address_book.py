"""Unit tests for the AddressBook aggregate: add/delete/restore/tag and index consistency."""

import random
from datetime import date, timedelta

import pytest

from contactbook.domain import AddressBook, Contact, Tag

TODAY = date(2026, 10, 19)

FRIENDS = Tag("friends")
WORK = Tag("work")


def _book(today: date = TODAY) -> AddressBook:
    return AddressBook(clock=lambda: today)


def _jane(**kwargs) -> Contact:
    return Contact(family_name="Doe", given_name="Jane", **kwargs)


def _jo(**kwargs) -> Contact:
    return Contact(family_name="Roe", given_name="Jo", **kwargs)


def assert_consistent(book: AddressBook) -> None:
    live = set(book.contacts())
    index = book.tag_index()
    assert len(live) == len(book)
    for tag, members in index.items():
        assert members, f"empty bucket for {tag}"
        for c in members:
            assert c in live
            assert tag in book.get(c).tags
    for c in live:
        for tag in c.tags:
            assert c in index[tag]
    for _, c in book.deleted_contacts():
        assert c not in live


def test_add_and_get_returns_stored_instance():
    book = _book()
    jane = _jane(tags={"friends"})
    assert book.add(jane) is True
    found = book.get(_jane())
    assert found is jane
    assert book.get(_jo()) is None
    assert book.contacts_tagged(FRIENDS) == [jane]


def test_add_duplicate_is_noop():
    book = _book()
    assert book.add(_jane()) is True
    assert book.add(_jane(tags={"work"})) is False
    assert len(book) == 1
    assert book.tags() == []


def test_contacts_are_sorted():
    book = _book()
    book.add(_jo())
    book.add(Contact(family_name="Abe", given_name="Zed"))
    book.add(_jane())
    assert [c.family_name for c in book.contacts()] == ["Abe", "Doe", "Roe"]
    assert [c.family_name for c in book] == ["Abe", "Doe", "Roe"]


def test_none_arguments_rejected():
    book = _book()
    with pytest.raises(ValueError):
        book.add(None)
    with pytest.raises(ValueError):
        book.delete(None)
    with pytest.raises(ValueError):
        book.restore(None)
    with pytest.raises(ValueError):
        book.get(None)
    with pytest.raises(ValueError):
        book.add_tag(None, _jane())
    with pytest.raises(ValueError):
        book.remove_tag(FRIENDS, None)


def test_delete_moves_to_trash_and_unindexes():
    book = _book()
    book.add(_jane(tags={"friends"}))
    assert book.delete(_jane()) is True
    assert len(book) == 0
    assert book.tags() == []
    assert book.deleted_contacts() == [(TODAY, _jane())]
    assert book.delete(_jane()) is False


def test_restore_reindexes_tags():
    book = _book()
    book.add(_jane(tags={"friends", "work"}))
    book.delete(_jane())
    assert book.restore(_jane()) is True
    assert book.contacts_tagged(FRIENDS) == [_jane()]
    assert book.contacts_tagged(WORK) == [_jane()]
    assert book.deleted_contacts() == []
    assert book.restore(_jane()) is False


def test_restore_unknown_contact_fails():
    book = _book()
    book.add(_jane())
    assert book.restore(_jo()) is False
    assert book.restore(_jane()) is False


def test_scenario_delete_then_restore():
    book = _book()
    a = _jane(tags={"friends"})
    b = _jo(tags={"friends", "work"})
    book.add(a)
    book.add(b)

    book.delete(a)
    assert book.contacts() == [b]
    assert book.tag_index() == {FRIENDS: [b], WORK: [b]}
    assert book.deleted_contacts() == [(TODAY, a)]

    book.restore(a)
    assert book.contacts() == [a, b]
    assert book.tag_index() == {FRIENDS: [a, b], WORK: [b]}
    assert book.deleted_contacts() == []


def test_add_tag_updates_contact_and_index():
    book = _book()
    book.add(_jane())
    assert book.add_tag(FRIENDS, _jane()) is True
    assert FRIENDS in book.get(_jane()).tags
    assert book.tags() == [FRIENDS]
    assert book.add_tag(FRIENDS, _jo()) is False


def test_remove_tag_drops_empty_bucket():
    book = _book()
    book.add(_jane(tags={"friends"}))
    book.add(_jo(tags={"friends"}))
    assert book.remove_tag(FRIENDS, _jane()) is True
    assert book.contacts_tagged(FRIENDS) == [_jo()]
    assert book.remove_tag(FRIENDS, _jo()) is True
    assert book.tags() == []
    assert book.remove_tag(FRIENDS, _jo()) is False


def test_replace_swaps_record_and_index():
    book = _book()
    book.add(_jane(tags={"friends"}))
    edited = _jane(phone_numbers=("+12025551111",), tags={"work"})
    assert book.replace(_jane(), edited) is True
    assert book.get(_jane()) is None
    assert book.get(edited) is edited
    assert book.tag_index() == {WORK: [edited]}
    assert book.deleted_contacts() == []


def test_replace_rejects_collision_and_missing():
    book = _book()
    book.add(_jane())
    book.add(_jo())
    assert book.replace(_jane(), _jo()) is False
    assert book.replace(Contact(given_name="Nobody"), _jane()) is False
    assert len(book) == 2


def test_re_adding_trashed_contact_clears_trash():
    book = _book()
    book.add(_jane())
    book.delete(_jane())
    book.add(_jane())
    assert book.deleted_contacts() == []
    assert_consistent(book)


def test_delete_purges_expired_trash():
    day = {"today": TODAY}
    book = AddressBook(retention_days=30, clock=lambda: day["today"])
    book.add(_jane())
    book.delete(_jane())
    day["today"] = TODAY + timedelta(days=31)
    book.add(_jo())
    book.delete(_jo())
    assert [c for _, c in book.deleted_contacts()] == [_jo()]
    assert book.restore(_jane()) is False


def test_from_snapshot_rejects_inconsistent_parts():
    jane = _jane(tags={"friends"})
    with pytest.raises(ValueError, match="not a contact"):
        AddressBook.from_snapshot([], {FRIENDS: [jane]})
    with pytest.raises(ValueError, match="no contacts"):
        AddressBook.from_snapshot([jane], {FRIENDS: []})
    with pytest.raises(ValueError, match="not indexed"):
        AddressBook.from_snapshot([jane], {})
    with pytest.raises(ValueError, match="does not carry"):
        AddressBook.from_snapshot([jane], {FRIENDS: [jane], WORK: [jane]})
    with pytest.raises(ValueError, match="Duplicate"):
        AddressBook.from_snapshot([_jane(), _jane()], {})


def test_from_snapshot_links_buckets_to_stored_instances():
    jane = _jane(tags={"friends"})
    book = AddressBook.from_snapshot([jane], {FRIENDS: [_jane(tags={"friends"})]})
    assert book.contacts_tagged(FRIENDS)[0] is jane


@pytest.mark.parametrize("seed", range(20))
def test_random_operations_keep_index_consistent(seed):
    rng = random.Random(seed)
    people = [
        Contact(family_name=f, given_name=g)
        for f in ("Doe", "Roe", "Poe")
        for g in ("Jane", "Jo")
    ]
    tags = [Tag("friends"), Tag("work"), Tag("gym")]
    book = _book()
    for _ in range(200):
        op = rng.choice(["add", "delete", "restore", "tag", "untag"])
        person = rng.choice(people)
        if op == "add":
            book.add(person.edited(tags=set(rng.sample(tags, rng.randint(0, 2)))))
        elif op == "delete":
            book.delete(person)
        elif op == "restore":
            book.restore(person)
        elif op == "tag":
            book.add_tag(rng.choice(tags), person)
        else:
            book.remove_tag(rng.choice(tags), person)
        assert_consistent(book)


@pytest.mark.parametrize("seed", range(5))
def test_delete_restore_round_trip_keeps_tags(seed):
    rng = random.Random(seed)
    tags = [Tag(n) for n in ("a", "b", "c", "d")]
    book = _book()
    people = []
    for i in range(8):
        c = Contact(family_name=f"F{i}", given_name="G", tags=set(rng.sample(tags, rng.randint(0, 3))))
        book.add(c)
        people.append(c)
    before = book.tag_index()
    victim = rng.choice(people)
    book.delete(victim)
    book.restore(victim)
    assert book.tag_index() == before
    assert victim in book
    assert victim not in book.trash


def test_address_book_satisfies_capability_ports():
    from contactbook.application import ContactList, TaggableList, TrashCan

    book = _book()
    assert isinstance(book, ContactList)
    assert isinstance(book, TaggableList)
    assert isinstance(book, TrashCan)


def test_copy_is_independent():
    book = _book()
    book.add(_jane(tags={"friends"}))
    book.add(_jo())
    book.delete(_jo())
    copy = book.copy()
    assert copy.contacts() == book.contacts()
    assert copy.tag_index() == book.tag_index()
    assert copy.deleted_contacts() == book.deleted_contacts()

    book.add_tag(WORK, _jane())
    book.restore(_jo())
    assert copy.get(_jane()).tags == {FRIENDS}
    assert copy.tags() == [FRIENDS]
    assert _jo() not in copy
    assert_consistent(copy)
