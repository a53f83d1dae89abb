import html
import json
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, RedirectResponse

from ubuntumeet.auth.session import SessionData, get_current_session
from ubuntumeet.meeting.recorder import MIME_TYPE, PERMISSION_ALERT
from ubuntumeet.meeting.session import DASHBOARD_PATH

router = APIRouter()

DAILY_JS = "https://unpkg.com/@daily-co/daily-js"
WHITEBOARD_URL = "https://www.tldraw.com/"

BASE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} | UbuntuMeet</title>
    <style>
        body {{ margin: 0; min-height: 100vh; background: #0D0D0D; color: #fff; font-family: sans-serif; display: flex; flex-direction: column; }}
        nav, footer {{ display: flex; justify-content: space-between; align-items: center; padding: 0 24px; height: 64px; border-color: rgba(255,255,255,0.1); }}
        nav {{ border-bottom: 1px solid; }}
        footer {{ border-top: 1px solid; color: #9ca3af; font-size: 14px; }}
        main {{ flex: 1; max-width: 1120px; width: 100%; margin: 0 auto; padding: 48px 16px; box-sizing: border-box; }}
        a {{ color: #fff; text-decoration: none; margin-left: 16px; }}
        .brand {{ font-weight: bold; font-size: 20px; margin-left: 0; }}
        .card {{ background: #111; border: 1px solid rgba(255,255,255,0.1); border-radius: 16px; padding: 32px; margin-bottom: 24px; }}
        button {{ background: #1A6B3C; color: #fff; border: 0; border-radius: 8px; padding: 12px 20px; cursor: pointer; }}
        input {{ background: #1a1a1a; color: #fff; border: 1px solid #333; border-radius: 8px; padding: 12px; }}
        .warning {{ color: #eab308; }}
    </style>
</head>
<body>
{nav}
<main>
{body}
</main>
{footer}
</body>
</html>
"""

FOOTER = "<footer><span>UbuntuMeet</span><span>I am because we are.</span></footer>"


def render_nav(session: Optional[SessionData]) -> str:
    if session:
        links = (
            '<a href="/dashboard">Dashboard</a>'
            '<a href="/profile">Profile</a>'
            '<a href="#" onclick="fetch(\'/api/auth/logout\', {method: \'POST\'}).then(() => location.href = \'/\')">Sign out</a>'
        )
    else:
        links = '<a href="/signin">Sign In</a><a href="/signup">Sign Up</a>'
    return f'<nav><a class="brand" href="/">UbuntuMeet</a><div>{links}</div></nav>'


def render_page(title: str, body: str, session: Optional[SessionData] = None, chrome: bool = True) -> HTMLResponse:
    return HTMLResponse(BASE_TEMPLATE.format(
        title=html.escape(title),
        nav=render_nav(session) if chrome else "",
        body=body,
        footer=FOOTER if chrome else "",
    ))


def js_string(value: str) -> str:
    # Safe inside an inline <script>
    return json.dumps(value).replace("</", "<\\/")


def auth_form(action: str, title: str, with_name: bool = False, name: str = "") -> str:
    name_field = (
        f'<input name="full_name" placeholder="Full name" value="{html.escape(name)}"><br><br>'
        if with_name else ""
    )
    return f"""
<div class="card">
    <h1>{title}</h1>
    <form id="auth-form">
        {name_field}
        <input name="email" type="email" placeholder="Email" required><br><br>
        <input name="password" type="password" placeholder="Password" required><br><br>
        <button type="submit">{title}</button>
    </form>
    <p id="message"></p>
</div>
<script>
document.getElementById("auth-form").addEventListener("submit", async (e) => {{
    e.preventDefault();
    const payload = Object.fromEntries(new FormData(e.target));
    const res = await fetch("{action}", {{method: "POST", headers: {{"Content-Type": "application/json"}}, body: JSON.stringify(payload)}});
    const data = await res.json();
    if (res.ok && (data.session_issued !== false)) {{ location.href = "/dashboard"; return; }}
    document.getElementById("message").textContent = data.message || data.detail || "Something went wrong";
}});
</script>
"""


@router.get("/", response_class=HTMLResponse)
async def landing(session: Optional[SessionData] = Depends(get_current_session)):
    body = """
<div class="card">
    <h1>Meet, talk and build together.</h1>
    <p>Secure video meetings with screen sharing, a whiteboard and local recording.</p>
    <form action="/signup" method="get">
        <input name="name" placeholder="Your display name">
        <button type="submit">Get started</button>
    </form>
</div>
"""
    return render_page("Welcome", body, session)


@router.get("/signup", response_class=HTMLResponse)
async def signup_page(name: str = "", session: Optional[SessionData] = Depends(get_current_session)):
    return render_page("Sign Up", auth_form("/api/auth/signup", "Sign Up", with_name=True, name=name), session)


@router.get("/signin", response_class=HTMLResponse)
async def signin_page(session: Optional[SessionData] = Depends(get_current_session)):
    return render_page("Sign In", auth_form("/api/auth/signin", "Sign In"), session)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(session: Optional[SessionData] = Depends(get_current_session)):
    if not session:
        return RedirectResponse("/signin", status_code=303)
    body = """
<div id="greeting"><h1>Loading...</h1></div>
<div class="card">
    <h2>Start a Meeting</h2>
    <button id="start">Start Instant Meeting</button>
</div>
<div class="card">
    <h2>Join a Meeting</h2>
    <form id="join"><input name="link" placeholder="Meeting link (e.g., https://domain.daily.co/room)" required> <button type="submit">Join</button></form>
</div>
<div class="card"><h2>Recent Meetings</h2><div id="meetings">No recent meetings found.</div></div>
<script>
function textNode(tag, text) {
    const node = document.createElement(tag);
    node.textContent = text;
    return node;
}
fetch("/api/dashboard").then(r => r.ok ? r.json() : Promise.reject(r)).then(data => {
    const greeting = document.getElementById("greeting");
    greeting.replaceChildren(
        textNode("h1", `Welcome back, ${data.greeting_name}!`),
        textNode("p", "Ready to connect with your team?"));
    if (data.db_error) {
        const warning = textNode("p", "Warning: the database tables have not been created yet.");
        warning.className = "warning";
        greeting.append(warning);
    }
    if (data.meetings.length) {
        document.getElementById("meetings").replaceChildren(...data.meetings.map(m => textNode("div",
            `${m.room_name} | ${m.started_at ? new Date(m.started_at).toLocaleDateString() : ""} | ${m.participant_count}`)));
    }
}).catch(() => location.href = "/signin");
document.getElementById("start").addEventListener("click", async (e) => {
    e.target.disabled = true; e.target.textContent = "Creating Room...";
    const res = await fetch("/api/meetings/start", {method: "POST"});
    const data = await res.json();
    if (res.ok) { location.href = data.path; return; }
    alert(data.message);
    e.target.disabled = false; e.target.textContent = "Start Instant Meeting";
});
document.getElementById("join").addEventListener("submit", async (e) => {
    e.preventDefault();
    const res = await fetch("/api/meetings/join", {method: "POST", headers: {"Content-Type": "application/json"}, body: JSON.stringify(Object.fromEntries(new FormData(e.target)))});
    const data = await res.json();
    if (res.ok) location.href = data.path; else alert(data.error);
});
</script>
"""
    return render_page("Dashboard", body, session)


@router.get("/profile", response_class=HTMLResponse)
async def profile_page(session: Optional[SessionData] = Depends(get_current_session)):
    if not session:
        return RedirectResponse("/signin", status_code=303)
    body = """
<h1>Account Settings</h1>
<p id="message"></p>
<div class="card"><h2>Profile Information</h2><p id="full-name"></p>
    <form id="profile"><input name="display_name" placeholder="How you appear in meetings"> <button type="submit">Save Changes</button></form></div>
<div class="card"><h2>Security</h2>
    <form id="password"><input name="password" type="password" placeholder="Enter new password"> <button type="submit">Update Password</button></form></div>
<div class="card"><h2>Danger Zone</h2><button id="delete" style="background:#dc2626">Delete Account</button></div>
<script>
const say = async (res) => { const d = await res.json(); document.getElementById("message").textContent = d.message || d.error; };
fetch("/api/profile").then(r => r.json()).then(d => {
    document.getElementById("full-name").textContent = d.profile.full_name || "";
    document.querySelector("#profile input").value = d.profile.display_name || "";
});
document.getElementById("profile").addEventListener("submit", async (e) => {
    e.preventDefault();
    say(await fetch("/api/profile", {method: "PATCH", headers: {"Content-Type": "application/json"}, body: JSON.stringify(Object.fromEntries(new FormData(e.target)))}));
});
document.getElementById("password").addEventListener("submit", async (e) => {
    e.preventDefault();
    say(await fetch("/api/profile/password", {method: "POST", headers: {"Content-Type": "application/json"}, body: JSON.stringify(Object.fromEntries(new FormData(e.target)))}));
    e.target.reset();
});
document.getElementById("delete").addEventListener("click", async () => {
    if (!confirm("Are you sure you want to delete your account? This action cannot be undone.")) return;
    const d = await (await fetch("/api/profile", {method: "DELETE"})).json();
    location.href = "/"; alert(d.message);
});
</script>
"""
    return render_page("Profile", body, session)


@router.get("/meeting/{room_name}", response_class=HTMLResponse)
async def meeting_page(room_name: str, url: Optional[str] = None):
    if not url:
        return RedirectResponse(DASHBOARD_PATH, status_code=303)
    body = f"""
<p>This meeting is private. Nothing is stored on our servers.</p>
<div id="call" style="height:70vh"></div>
<iframe id="whiteboard" src="{WHITEBOARD_URL}" style="display:none; width:100%; height:70vh; border:0; background:#fff"></iframe>
<div id="controls">
    <button id="record">Record</button>
    <button id="toggle-whiteboard">Whiteboard</button>
    <button id="leave" style="background:#dc2626">Leave</button>
</div>
<script src="{DAILY_JS}"></script>
<script>
const frame = DailyIframe.createFrame(document.getElementById("call"), {{iframeStyle: {{width: "100%", height: "100%", border: "0"}}}});
let released = false;
const release = () => {{ if (released) return; released = true; frame.leave().then(() => frame.destroy()); }};
frame.join({{url: {js_string(url)}}}).catch(err => console.error("Error joining call", err));
frame.on("left-meeting", () => {{ release(); location.href = "{DASHBOARD_PATH}"; }});
window.addEventListener("pagehide", release);
document.getElementById("leave").addEventListener("click", () => {{ release(); location.href = "{DASHBOARD_PATH}"; }});

document.getElementById("toggle-whiteboard").addEventListener("click", () => {{
    const board = document.getElementById("whiteboard"), call = document.getElementById("call");
    const show = board.style.display === "none";
    board.style.display = show ? "block" : "none";
    call.style.display = show ? "none" : "block";
}});

let recorder = null, chunks = [];
document.getElementById("record").addEventListener("click", async (e) => {{
    if (recorder) {{ recorder.stop(); return; }}
    try {{
        const stream = await navigator.mediaDevices.getDisplayMedia({{video: true, audio: true}});
        chunks = [];
        recorder = new MediaRecorder(stream, {{mimeType: "{MIME_TYPE}"}});
        recorder.ondataavailable = (ev) => {{ if (ev.data.size > 0) chunks.push(ev.data); }};
        recorder.onstop = () => {{
            const a = document.createElement("a");
            a.href = URL.createObjectURL(new Blob(chunks, {{type: "{MIME_TYPE}"}}));
            a.download = `UbuntuMeet-Recording-${{new Date().toISOString()}}.webm`;
            a.click();
            URL.revokeObjectURL(a.href);
            stream.getTracks().forEach(t => t.stop());
            recorder = null; e.target.textContent = "Record";
        }};
        recorder.start();
        e.target.textContent = "Stop Rec";
    }} catch (err) {{
        console.error("Error starting recording:", err);
        alert("{PERMISSION_ALERT}");
    }}
}});
</script>
"""
    return render_page(room_name, body, chrome=False)
