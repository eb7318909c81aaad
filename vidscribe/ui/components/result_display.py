"""
Result display components: transcription text and tag chips.
"""

import streamlit as st


def render_tags(tags: list[str]) -> None:
    if not tags:
        st.caption("No tags")
        return
    st.markdown(" ".join(f"`{tag}`" for tag in tags))


def render_result(record: dict) -> None:
    """Render one processed video (the ``data`` object of an upload response).

    Args:
        record: Dict with ``transcription``, ``tags`` and optionally
            ``videoUrl``, ``id`` and ``createdAt``.
    """
    with st.container(border=True):
        st.subheader("Transcription")
        st.write(record.get("transcription", ""))

        st.subheader("Tags")
        render_tags(record.get("tags", []))

        video_url = record.get("videoUrl")
        if video_url:
            st.markdown(f"[Open stored video]({video_url})")

        created_at = record.get("createdAt")
        if created_at:
            st.caption(f"ID {record.get('id', '?')} | {created_at}")


def render_history(records: list[dict]) -> None:
    """Render previously processed videos, newest first."""
    st.caption(f"{len(records)} video(s)")
    for record in records:
        label = record.get("transcription", "")[:60] or record.get("id", "")
        with st.expander(label):
            st.write(record.get("transcription", ""))
            render_tags(record.get("tags", []))
            if record.get("videoUrl"):
                st.markdown(f"[Open stored video]({record['videoUrl']})")
            st.caption(record.get("createdAt", ""))
