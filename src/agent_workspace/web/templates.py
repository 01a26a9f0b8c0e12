"""HTML/CSS/JS for the web workspace - single page, no build step."""

WORKSPACE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>AI Agent Workspace</title>
<style>
:root {
	--bg: #0d1117;
	--bg-card: #161b22;
	--border: #30363d;
	--text: #c9d1d9;
	--text-dim: #8b949e;
	--text-bright: #f0f6fc;
	--accent: #58a6ff;
	--green: #3fb950;
	--red: #f85149;
	--yellow: #d29922;
}
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
	background: var(--bg);
	color: var(--text);
	font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Helvetica, Arial, sans-serif;
	line-height: 1.5;
}
.header { padding: 16px 24px; border-bottom: 1px solid var(--border); background: var(--bg-card); }
.header h1 { font-size: 18px; color: var(--text-bright); font-weight: 600; }
.container { display: grid; grid-template-columns: 280px 1fr; gap: 24px; padding: 24px; }
.card { background: var(--bg-card); border: 1px solid var(--border); border-radius: 6px; padding: 16px; }
.agent { display: flex; gap: 8px; align-items: center; padding: 6px 0; }
.status { font-size: 12px; color: var(--text-dim); }
.status.active, .status.thinking { color: var(--yellow); }
.status.complete { color: var(--green); }
.status.error { color: var(--red); }
.messages { min-height: 240px; max-height: 60vh; overflow-y: auto; margin-bottom: 12px; }
.msg { padding: 8px 0; border-bottom: 1px solid var(--border); white-space: pre-wrap; }
.msg.user { color: var(--accent); }
.controls { display: flex; gap: 8px; }
input, select, button {
	background: var(--bg); color: var(--text); border: 1px solid var(--border);
	border-radius: 6px; padding: 6px 10px; font-size: 14px;
}
input { flex: 1; }
button { cursor: pointer; }
</style>
</head>
<body>
<div class="header"><h1>AI Agent Workspace</h1></div>
<div class="container">
	<div class="card">
		<div id="agents"></div>
		<hr style="border-color: var(--border); margin: 12px 0">
		<div id="plan" class="status">No plan</div>
		<button id="reset" style="margin-top: 12px">Reset agents</button>
	</div>
	<div class="card">
		<div id="messages" class="messages"></div>
		<div class="controls">
			<select id="mode">
				<option value="act">act</option>
				<option value="plan">plan</option>
				<option value="ask">ask</option>
			</select>
			<input id="text" placeholder="Describe a task...">
			<button id="send">Send</button>
		</div>
	</div>
</div>
<script>
const session = new URLSearchParams(location.search).get("session") || "default";
const q = "?session=" + encodeURIComponent(session);

function esc(s) {
	const d = document.createElement("div");
	d.textContent = s == null ? "" : String(s);
	return d.innerHTML;
}

async function refresh() {
	const state = await (await fetch("/api/state" + q)).json();
	document.getElementById("agents").innerHTML = state.agents.map(a =>
		`<div class="agent"><span>${esc(a.avatar)}</span><span>${esc(a.name)}</span>` +
		`<span class="status ${esc(a.status)}">${esc(a.status)}</span></div>`
	).join("");
	const plan = state.current_plan;
	document.getElementById("plan").innerHTML = plan
		? `${esc(plan.title)}<br>${esc(plan.status)} - ${plan.steps.length} steps`
		: "No plan";
}

function addMessages(messages) {
	const box = document.getElementById("messages");
	for (const m of messages) {
		const div = document.createElement("div");
		div.className = "msg " + m.type;
		div.textContent = (m.agent_type ? "[" + m.agent_type + "] " : "") + m.content;
		box.appendChild(div);
	}
	box.scrollTop = box.scrollHeight;
}

async function send() {
	const input = document.getElementById("text");
	const text = input.value.trim();
	if (!text) return;
	input.value = "";
	const timer = setInterval(refresh, 1000);
	try {
		const res = await fetch("/api/messages" + q, {
			method: "POST",
			headers: {"Content-Type": "application/json"},
			body: JSON.stringify({text: text, mode: document.getElementById("mode").value}),
		});
		const data = await res.json();
		addMessages(data.messages || []);
	} finally {
		clearInterval(timer);
		refresh();
	}
}

document.getElementById("send").onclick = send;
document.getElementById("text").addEventListener("keydown", e => { if (e.key === "Enter") send(); });
document.getElementById("reset").onclick = async () => {
	await fetch("/api/agents/reset" + q, {method: "POST"});
	refresh();
};
refresh();
</script>
</body>
</html>
"""
