# Run from project root: streamlit run sprintbot/ui.py
# UI talks to the backend demo endpoint (POST /api/demo/query). History is kept in the browser session only.

import os

import requests
import streamlit as st

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:3000")

SUGGESTED_QUESTIONS = [
    "How many work items are ready for production?",
    "What is blocked in the current sprint?",
    "Show me the sprint progress",
    "What is Jane working on?",
]

st.title("Sprint Assistant")

# Sprint header (on every render)
try:
    r = requests.get(f"{API_BASE}/api/sprint/summary", timeout=10)
    if r.ok:
        data = r.json().get("data") or {}
        sprint = data.get("sprint") or {}
        st.caption(
            f"{sprint.get('name', 'Current sprint')} · {data.get('total_items', 0)} items · "
            f"{data.get('ready_for_production', 0)} ready · {data.get('in_progress', 0)} in progress · "
            f"{data.get('blocked', 0)} blocked"
        )
        if sprint.get("goal"):
            st.caption(f"Goal: {sprint['goal']}")
    else:
        st.caption("Could not load the current sprint.")
except requests.RequestException:
    st.caption("Backend not reachable — start the API first.")

if "messages" not in st.session_state:
    st.session_state.messages = []
if st.button("New chat", key="new_chat"):
    st.session_state.messages = []
    st.rerun()

if not st.session_state.messages:
    st.caption("Try one of these:")
    for i, question in enumerate(SUGGESTED_QUESTIONS):
        if st.button(question, key=f"suggested_{i}"):
            st.session_state.messages.append({"role": "user", "content": question})
            st.session_state.pending_query = question
            st.rerun()

for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        st.text(msg["content"])

# If we just submitted a query, show "Thinking..." while waiting for the answer
if st.session_state.get("pending_query"):
    prompt = st.session_state.pending_query
    with st.chat_message("assistant"):
        placeholder = st.empty()
        placeholder.caption("Thinking...")
        try:
            r = requests.post(f"{API_BASE}/api/demo/query", json={"message": prompt}, timeout=90)
            body = r.json() if r.headers.get("content-type", "").startswith("application/json") else {}
            if r.ok:
                answer = body.get("answer") or "Sorry, I couldn't find an answer."
                placeholder.text(answer)
            else:
                answer = f"Error: {r.status_code} — {body.get('error') or r.text[:200]}"
                placeholder.error(answer)
        except requests.RequestException as e:
            answer = f"Connection failed: {e}"
            placeholder.error(answer)
        st.session_state.messages.append({"role": "assistant", "content": answer})
    del st.session_state["pending_query"]
    st.rerun()

if prompt := st.chat_input("Ask about the current sprint, blocked items, or what someone is working on"):
    st.session_state.messages.append({"role": "user", "content": prompt})
    st.session_state.pending_query = prompt
    st.rerun()
