from __future__ import annotations

import pytest

from structure_organizer import errors
from structure_organizer.models import TargetType

from tests.helpers import (
    assert_tree_consistent,
    count_comments,
    fetch_files,
    fetch_folders,
    folder_paths,
)


pytestmark = pytest.mark.anyio


async def test_docs_scenario(session, structure_id, folder_service, file_service):
    root_id = await folder_service.create_folder(session, "Docs", structure_id, None)
    guides_id = await folder_service.create_folder(session, "Guides", structure_id, root_id)
    file_id = await file_service.create_file(session, "intro.md", guides_id, structure_id)

    root = await folder_service.get_folder(session, root_id)
    guides = await folder_service.get_folder(session, guides_id)
    intro = await file_service.get_file(session, file_id)
    assert (root.path, root.level) == ("Docs", 0)
    assert (guides.path, guides.level) == ("Docs/Guides", 1)
    assert intro.path == "Docs/Guides/intro.md"
    assert intro.type == "md"

    await folder_service.rename_folder(session, guides_id, "HowTo")

    intro = await file_service.get_file(session, file_id)
    assert intro.path == "Docs/HowTo/intro.md"
    await assert_tree_consistent(session, structure_id)


async def test_create_folder_notifies(session, structure_id, folder_service, notifier):
    notifier.events.clear()
    await folder_service.create_folder(session, "Docs", structure_id)
    assert notifier.events == [{"type": "refresh", "structure_id": structure_id}]


async def test_create_folder_with_invalid_name(session, structure_id, folder_service):
    with pytest.raises(errors.InvalidNameError):
        await folder_service.create_folder(session, "a/b", structure_id)
    with pytest.raises(errors.InvalidNameError):
        await folder_service.create_folder(session, "", structure_id)


async def test_create_folder_in_missing_structure(session, folder_service):
    with pytest.raises(errors.NotFoundError):
        await folder_service.create_folder(session, "Docs", 404)


async def test_create_folder_with_missing_parent(session, structure_id, folder_service):
    with pytest.raises(errors.NotFoundError):
        await folder_service.create_folder(session, "Guides", structure_id, 404)


async def test_create_folder_with_parent_from_other_structure(
    session, structure_id, structure_service, folder_service
):
    other_id = await structure_service.create_structure(session, "Other")
    foreign_root = await folder_service.create_folder(session, "Other", other_id)

    with pytest.raises(errors.NotFoundError):
        await folder_service.create_folder(session, "Guides", structure_id, foreign_root)


async def test_create_existing_folder_without_overwrite(session, structure_id, folder_service, notifier):
    root_id = await folder_service.create_folder(session, "Docs", structure_id)
    notifier.events.clear()

    again = await folder_service.create_folder(session, "Docs", structure_id, allow_overwrite=False)

    assert again == root_id
    assert len(await fetch_folders(session, structure_id)) == 1
    assert notifier.events == []


async def test_same_path_in_different_structures(session, structure_id, structure_service, folder_service):
    other_id = await structure_service.create_structure(session, "Other")

    first = await folder_service.create_folder(session, "Docs", structure_id)
    second = await folder_service.create_folder(session, "Docs", other_id)

    assert first != second


async def test_create_existing_folder_with_overwrite_rebuilds_structure(
    session, structure_id, folder_service, file_service, comment_service
):
    root_id = await folder_service.create_folder(session, "Docs", structure_id)
    sub_id = await folder_service.create_folder(session, "Sub", structure_id, root_id)
    await folder_service.create_folder(session, "Other", structure_id)
    file_id = await file_service.create_file(session, "a.txt", sub_id, structure_id)
    await comment_service.add_comment(session, file_id, TargetType.FILE, "note")
    await comment_service.add_comment(session, root_id, TargetType.FOLDER, "note")

    new_root_id = await folder_service.create_folder(session, "Docs", structure_id, allow_overwrite=True)

    folders = await fetch_folders(session, structure_id)
    assert [(f.id, f.path) for f in folders] == [(new_root_id, "Docs")]
    assert await fetch_files(session, structure_id) == []
    assert await count_comments(session) == 0


async def test_overwrite_does_not_touch_other_structures(
    session, structure_id, structure_service, folder_service
):
    other_id = await structure_service.create_structure(session, "Other")
    await folder_service.create_folder(session, "Other", other_id)
    await folder_service.create_folder(session, "Docs", structure_id)

    await folder_service.create_folder(session, "Docs", structure_id, allow_overwrite=True)

    assert list(await folder_paths(session, other_id)) == ["Other"]


async def test_overwrite_of_nested_folder_rolls_back(session, structure_id, folder_service):
    root_id = await folder_service.create_folder(session, "Docs", structure_id)
    await folder_service.create_folder(session, "Sub", structure_id, root_id)

    with pytest.raises(errors.NotFoundError):
        await folder_service.create_folder(session, "Sub", structure_id, root_id, allow_overwrite=True)

    assert await folder_paths(session, structure_id) == {"Docs": 0, "Docs/Sub": 1}


async def _build_tree(session, structure_id, folder_service, file_service):
    """Docs/{A/{B/{C}, b.txt}, Z} with a file in C."""
    ids = {}
    ids["Docs"] = await folder_service.create_folder(session, "Docs", structure_id)
    ids["A"] = await folder_service.create_folder(session, "A", structure_id, ids["Docs"])
    ids["B"] = await folder_service.create_folder(session, "B", structure_id, ids["A"])
    ids["C"] = await folder_service.create_folder(session, "C", structure_id, ids["B"])
    ids["Z"] = await folder_service.create_folder(session, "Z", structure_id, ids["Docs"])
    ids["b.txt"] = await file_service.create_file(session, "b.txt", ids["A"], structure_id)
    ids["c.txt"] = await file_service.create_file(session, "c.txt", ids["C"], structure_id)
    return ids


async def test_rename_folder_updates_descendants(session, structure_id, folder_service, file_service):
    ids = await _build_tree(session, structure_id, folder_service, file_service)

    folder = await folder_service.rename_folder(session, ids["A"], "Alpha")

    assert folder.path == "Docs/Alpha"
    assert await folder_paths(session, structure_id) == {
        "Docs": 0,
        "Docs/Alpha": 1,
        "Docs/Alpha/B": 2,
        "Docs/Alpha/B/C": 3,
        "Docs/Z": 1,
    }
    files = {f.name: f.path for f in await fetch_files(session, structure_id)}
    assert files == {"b.txt": "Docs/Alpha/b.txt", "c.txt": "Docs/Alpha/B/C/c.txt"}
    await assert_tree_consistent(session, structure_id)


async def test_rename_root_folder(session, structure_id, folder_service, file_service):
    ids = await _build_tree(session, structure_id, folder_service, file_service)

    await folder_service.rename_folder(session, ids["Docs"], "Manuals")

    assert sorted(await folder_paths(session, structure_id)) == [
        "Manuals", "Manuals/A", "Manuals/A/B", "Manuals/A/B/C", "Manuals/Z",
    ]
    await assert_tree_consistent(session, structure_id)


async def test_rename_folder_to_existing_sibling(session, structure_id, folder_service, file_service):
    ids = await _build_tree(session, structure_id, folder_service, file_service)
    before = await folder_paths(session, structure_id)

    with pytest.raises(errors.ConflictError):
        await folder_service.rename_folder(session, ids["A"], "Z")

    assert await folder_paths(session, structure_id) == before


async def test_rename_folder_with_invalid_name(session, structure_id, folder_service):
    root_id = await folder_service.create_folder(session, "Docs", structure_id)

    with pytest.raises(errors.InvalidNameError):
        await folder_service.rename_folder(session, root_id, "a/b")


async def test_rename_missing_folder(session, folder_service):
    with pytest.raises(errors.NotFoundError):
        await folder_service.rename_folder(session, 404, "New")


async def test_move_folder_recomputes_paths_and_levels(session, structure_id, folder_service, file_service):
    ids = await _build_tree(session, structure_id, folder_service, file_service)

    folder = await folder_service.move_folder(session, ids["A"], ids["Z"])

    assert (folder.path, folder.level) == ("Docs/Z/A", 2)
    assert await folder_paths(session, structure_id) == {
        "Docs": 0,
        "Docs/Z": 1,
        "Docs/Z/A": 2,
        "Docs/Z/A/B": 3,
        "Docs/Z/A/B/C": 4,
    }
    files = {f.name: f.path for f in await fetch_files(session, structure_id)}
    assert files == {"b.txt": "Docs/Z/A/b.txt", "c.txt": "Docs/Z/A/B/C/c.txt"}
    await assert_tree_consistent(session, structure_id)


async def test_move_folder_to_root(session, structure_id, folder_service, file_service):
    ids = await _build_tree(session, structure_id, folder_service, file_service)

    folder = await folder_service.move_folder(session, ids["B"], None)

    assert folder.parent_id is None
    assert (folder.path, folder.level) == ("B", 0)
    assert (await folder_paths(session, structure_id))["B/C"] == 1
    await assert_tree_consistent(session, structure_id)


@pytest.mark.parametrize("target", ["A", "B", "C"])
async def test_move_folder_into_own_subtree(session, structure_id, folder_service, file_service, target):
    ids = await _build_tree(session, structure_id, folder_service, file_service)
    before = await folder_paths(session, structure_id)

    with pytest.raises(errors.CyclicMoveError):
        await folder_service.move_folder(session, ids["A"], ids[target])

    assert await folder_paths(session, structure_id) == before
    await assert_tree_consistent(session, structure_id)


async def test_move_folder_to_other_structure(session, structure_id, structure_service, folder_service):
    root_id = await folder_service.create_folder(session, "Docs", structure_id)
    other_id = await structure_service.create_structure(session, "Other")
    other_root = await folder_service.create_folder(session, "Other", other_id)

    with pytest.raises(errors.NotFoundError):
        await folder_service.move_folder(session, root_id, other_root)


async def test_move_folder_onto_taken_path(session, structure_id, folder_service):
    root_id = await folder_service.create_folder(session, "Docs", structure_id)
    a_id = await folder_service.create_folder(session, "A", structure_id, root_id)
    await folder_service.create_folder(session, "A", structure_id)

    with pytest.raises(errors.ConflictError):
        await folder_service.move_folder(session, a_id, None)


async def test_delete_folder_cascades(
    session, structure_id, folder_service, file_service, comment_service, notifier
):
    ids = await _build_tree(session, structure_id, folder_service, file_service)
    await comment_service.add_comment(session, ids["B"], TargetType.FOLDER, "folder note")
    await comment_service.add_comment(session, ids["c.txt"], TargetType.FILE, "file note")
    kept = await comment_service.add_comment(session, ids["Z"], TargetType.FOLDER, "kept")
    notifier.events.clear()

    await folder_service.delete_folder(session, ids["A"])

    assert await folder_paths(session, structure_id) == {"Docs": 0, "Docs/Z": 1}
    assert await fetch_files(session, structure_id) == []
    assert [c.id for c in await comment_service.list_comments(session)] == [kept.id]
    assert notifier.events == [{"type": "refresh", "structure_id": structure_id}]


async def test_delete_missing_folder(session, folder_service):
    with pytest.raises(errors.NotFoundError):
        await folder_service.delete_folder(session, 404)


async def test_list_folders(session, structure_id, folder_service, file_service):
    ids = await _build_tree(session, structure_id, folder_service, file_service)

    nodes = await folder_service.list_folders(session, structure_id)

    assert [n.path for n in nodes] == ["Docs", "Docs/A", "Docs/A/B", "Docs/A/B/C", "Docs/Z"]
    by_path = {n.path: n for n in nodes}
    assert by_path["Docs"].subfolder_count == 2
    assert by_path["Docs/A"].subfolder_count == 1
    assert by_path["Docs/Z"].subfolder_count == 0
    assert [(f.id, f.name, f.type) for f in by_path["Docs/A"].files] == [(ids["b.txt"], "b.txt", "txt")]
    assert by_path["Docs/A/B/C"].files[0].color == "#000000"
    assert by_path["Docs"].files == []


async def test_list_folders_is_depth_first_even_when_names_sort_otherwise(
    session, structure_id, folder_service
):
    root_id = await folder_service.create_folder(session, "a", structure_id)
    await folder_service.create_folder(session, "a b", structure_id)
    await folder_service.create_folder(session, "b", structure_id, root_id)

    nodes = await folder_service.list_folders(session, structure_id)

    assert [n.path for n in nodes] == ["a", "a/b", "a b"]


async def test_list_folders_across_structures(session, structure_id, structure_service, folder_service):
    other_id = await structure_service.create_structure(session, "Other")
    await folder_service.create_folder(session, "Zeta", structure_id)
    await folder_service.create_folder(session, "Alpha", other_id)

    nodes = await folder_service.list_folders(session)

    assert [(n.path, n.structure_id) for n in nodes] == [("Alpha", other_id), ("Zeta", structure_id)]
    assert await folder_service.list_folders(session, other_id) == [nodes[0]]
