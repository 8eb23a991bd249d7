import streamlit as st

from dashboard.constants import FOLDER_COLORS, NOTE_COLORS
from dashboard.data import repositories
from dashboard.data.api_client import ApiError

ALL_FOLDERS = "__all__"
UNASSIGNED = "unassigned"


def _flash_error(exc):
    st.session_state["notes.flash"] = exc.message


def _create_folder():
    name = str(st.session_state.get("notes.new_folder", "")).strip()
    if not name:
        st.session_state["notes.flash"] = "Folder name is required"
        return
    try:
        repositories.create_folder({"name": name, "color": st.session_state.get("notes.new_folder_color", "blue")})
        st.session_state["notes.new_folder"] = ""
    except ApiError as exc:
        _flash_error(exc)


def _move_folder(folders, index, step):
    target = index + step
    if target < 0 or target >= len(folders):
        return
    ordered = list(folders)
    ordered[index], ordered[target] = ordered[target], ordered[index]
    try:
        repositories.reorder_folders([{"id": folder["id"], "sort_order": position} for position, folder in enumerate(ordered)])
    except ApiError as exc:
        _flash_error(exc)


def _create_note(folder_choice):
    title = str(st.session_state.get("notes.new_title", "")).strip() or "Untitled"
    payload = {
        "title": title,
        "content": st.session_state.get("notes.new_content", ""),
        "color": st.session_state.get("notes.new_color", "default"),
    }
    if folder_choice not in (ALL_FOLDERS, UNASSIGNED):
        payload["folderId"] = folder_choice
    try:
        created = repositories.create_note(payload)
        st.session_state["notes.selected"] = created.get("id")
        st.session_state["notes.new_title"] = ""
        st.session_state["notes.new_content"] = ""
    except ApiError as exc:
        _flash_error(exc)


def _save_note(note_id):
    patch = {
        "title": st.session_state.get(f"notes.edit_title.{note_id}"),
        "content": st.session_state.get(f"notes.edit_content.{note_id}"),
        "color": st.session_state.get(f"notes.edit_color.{note_id}"),
        "isPinned": bool(st.session_state.get(f"notes.edit_pinned.{note_id}")),
        "isStarred": bool(st.session_state.get(f"notes.edit_starred.{note_id}")),
    }
    try:
        repositories.update_note(note_id, patch)
    except ApiError as exc:
        _flash_error(exc)


def _render_folders(folders, stats):
    counts = {item.get("folder_id") or UNASSIGNED: item.get("note_count", 0) for item in stats}
    options = [ALL_FOLDERS] + [folder["id"] for folder in folders] + [UNASSIGNED]
    names = {ALL_FOLDERS: "All notes", UNASSIGNED: f"Unassigned ({counts.get(UNASSIGNED, 0)})"}
    for folder in folders:
        names[folder["id"]] = f"{folder.get('emoji') or '📁'} {folder['name']} ({counts.get(folder['id'], 0)})"
    choice = st.radio("Folders", options, key="notes.folder", format_func=names.get)

    with st.expander("Manage folders"):
        st.text_input("New folder", key="notes.new_folder")
        st.selectbox("Color", FOLDER_COLORS, key="notes.new_folder_color")
        st.button("Create folder", key="notes.create_folder", on_click=_create_folder)
        for index, folder in enumerate(folders):
            cols = st.columns([0.6, 0.13, 0.13, 0.14])
            cols[0].write(folder["name"])
            cols[1].button("↑", key=f"notes.up.{folder['id']}", on_click=_move_folder, args=(folders, index, -1))
            cols[2].button("↓", key=f"notes.down.{folder['id']}", on_click=_move_folder, args=(folders, index, 1))
            if not folder.get("is_default") and cols[3].button("✕", key=f"notes.del_folder.{folder['id']}"):
                try:
                    repositories.delete_folder(folder["id"])
                    st.rerun()
                except ApiError as exc:
                    st.error(exc.message)
    return choice


def _render_editor(note):
    note_id = note["id"]
    st.text_input("Title", value=note.get("title") or "", key=f"notes.edit_title.{note_id}")
    st.text_area("Content", value=note.get("content") or "", height=260, key=f"notes.edit_content.{note_id}")
    cols = st.columns(3)
    color = note.get("color") if note.get("color") in NOTE_COLORS else "default"
    cols[0].selectbox("Color", NOTE_COLORS, index=NOTE_COLORS.index(color), key=f"notes.edit_color.{note_id}")
    cols[1].checkbox("Pinned", value=note.get("isPinned", False), key=f"notes.edit_pinned.{note_id}")
    cols[2].checkbox("Starred", value=note.get("isStarred", False), key=f"notes.edit_starred.{note_id}")
    st.caption(f"{note.get('wordCount', 0)} words • {note.get('characterCount', 0)} characters")
    action_cols = st.columns(2)
    action_cols[0].button("Save", key=f"notes.save.{note_id}", on_click=_save_note, args=(note_id,))
    if action_cols[1].button("Delete note", key=f"notes.delete.{note_id}"):
        try:
            repositories.delete_note(note_id)
            st.session_state.pop("notes.selected", None)
            st.rerun()
        except ApiError as exc:
            st.error(exc.message)


def render_notes_tab(ctx, compact=False):
    if not compact:
        st.markdown("<div class='section-title'>Notes</div>", unsafe_allow_html=True)

    flash = st.session_state.pop("notes.flash", None)
    if flash:
        st.error(flash)

    try:
        notes = repositories.list_notes()
        folders = [] if compact else repositories.list_folders()
        stats = [] if compact else repositories.folder_stats()
    except ApiError as exc:
        st.error(exc.message)
        return

    if compact:
        visible = [note for note in notes if not note.get("isArchived")][:5]
        if not visible:
            st.caption("No notes yet.")
        for note in visible:
            pin = "📌 " if note.get("isPinned") else ""
            st.markdown(f"{pin}**{note.get('title') or 'Untitled'}**")
            st.caption((note.get("content") or "")[:80])
        return

    side, main = st.columns([0.3, 0.7])
    with side:
        folder_choice = _render_folders(folders, stats)
    if folder_choice == UNASSIGNED:
        visible = [note for note in notes if not note.get("folderId")]
    elif folder_choice != ALL_FOLDERS:
        visible = [note for note in notes if note.get("folderId") == folder_choice]
    else:
        visible = notes
    show_archived = side.checkbox("Show archived", key="notes.show_archived")
    if not show_archived:
        visible = [note for note in visible if not note.get("isArchived")]

    with main:
        with st.expander("New note"):
            st.text_input("Title", key="notes.new_title")
            st.text_area("Content", key="notes.new_content", height=120)
            st.selectbox("Color", NOTE_COLORS, key="notes.new_color")
            st.button("Create note", key="notes.create", on_click=_create_note, args=(folder_choice,))

        if not visible:
            st.caption("No notes in this folder.")
            return
        ids = [note["id"] for note in visible]
        labels = {
            note["id"]: ("📌 " if note.get("isPinned") else "") + ("⭐ " if note.get("isStarred") else "") + (note.get("title") or "Untitled")
            for note in visible
        }
        selected = st.session_state.get("notes.selected")
        index = ids.index(selected) if selected in ids else 0
        selected = st.selectbox("Note", ids, index=index, format_func=labels.get)
        st.session_state["notes.selected"] = selected
        _render_editor(next(note for note in visible if note["id"] == selected))
