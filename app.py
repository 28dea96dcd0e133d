#!/usr/bin/env python3
"""
Omega Tanks - Interactive Web Interface

Edit an Omega program, then Step / Run / Pause / Reset the match in the browser.
"""

import sys
import os
import threading
from datetime import datetime
from typing import Optional

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from flask import Flask, render_template_string, jsonify, request

from omega.config import SimulationConfig, load_env
from omega.language import PROGRAMS, Program, parse_program, program_to_string
from omega.match import Simulation
from omega.world import GRID_SIZE, CELL_SIZE

load_env()

config = SimulationConfig.from_env()
app = Flask(__name__)

MAX_LOGS = 200

# Global state for the running match
_state_lock = threading.Lock()
current_game = {
    "source": PROGRAMS["sample"],
    "simulation": Simulation(parse_program(PROGRAMS["sample"])),
    "logs": [],
}

HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Omega Tanks</title>
    <link href="https://fonts.googleapis.com/css2?family=JetBrains+Mono:wght@400;600;700&family=Space+Grotesk:wght@400;500;600;700&display=swap" rel="stylesheet">
    <style>
        :root {
            --bg-dark: #070a12;
            --bg-card: #0f1420;
            --bg-hover: #161d2d;
            --accent: #00e5ff;
            --accent-dim: #00b3c7;
            --accent-glow: rgba(0, 229, 255, 0.15);
            --enemy: #ff2ad1;
            --text: #e0e0e0;
            --text-dim: #888;
            --border: #1f2a3a;
            --warning: #ffa502;
            --success: #00ffaa;
        }

        * { margin: 0; padding: 0; box-sizing: border-box; }

        body {
            font-family: 'Space Grotesk', sans-serif;
            background: var(--bg-dark);
            color: var(--text);
            min-height: 100vh;
        }

        .container { max-width: 1300px; margin: 0 auto; padding: 1.5rem; }

        header { text-align: center; margin-bottom: 1.5rem; }

        h1 {
            font-size: 2.2rem;
            font-weight: 700;
            background: linear-gradient(135deg, var(--accent) 0%, var(--enemy) 100%);
            -webkit-background-clip: text;
            -webkit-text-fill-color: transparent;
            background-clip: text;
        }

        .subtitle { color: var(--text-dim); font-size: 1rem; }

        .layout {
            display: grid;
            grid-template-columns: 1fr 1fr;
            gap: 1.5rem;
        }

        @media (max-width: 1000px) {
            .layout { grid-template-columns: 1fr; }
        }

        .card {
            background: var(--bg-card);
            border: 1px solid var(--border);
            border-radius: 12px;
            padding: 1.25rem;
            margin-bottom: 1rem;
        }

        .card h2 { font-size: 1rem; margin-bottom: 1rem; color: var(--accent); }

        canvas { width: 100%; border-radius: 10px; display: block; }

        .controls { display: grid; grid-template-columns: repeat(3, 1fr); gap: 0.7rem; }

        .btn {
            padding: 0.7rem 1rem;
            border: 1px solid var(--border);
            border-radius: 8px;
            font-family: 'Space Grotesk', sans-serif;
            font-size: 0.9rem;
            font-weight: 600;
            cursor: pointer;
            background: var(--bg-hover);
            color: var(--text);
        }

        .btn-primary { background: var(--accent); color: var(--bg-dark); }
        .btn-warning { background: var(--warning); color: var(--bg-dark); }

        .hud { display: grid; grid-template-columns: 1fr 1fr; gap: 1rem; font-family: 'JetBrains Mono', monospace; }
        .hud .label { font-size: 0.75rem; text-transform: uppercase; color: var(--text-dim); }
        .hud .hp { font-size: 1.2rem; }
        .status { grid-column: span 2; color: var(--accent); font-size: 0.85rem; }

        textarea, select {
            width: 100%;
            background: var(--bg-dark);
            border: 1px solid var(--border);
            border-radius: 8px;
            color: var(--text);
            font-family: 'JetBrains Mono', monospace;
            font-size: 0.85rem;
            padding: 0.7rem;
        }

        textarea { height: 340px; resize: vertical; }
        select { margin-bottom: 0.7rem; }

        .log {
            font-family: 'JetBrains Mono', monospace;
            font-size: 0.75rem;
            height: 160px;
            overflow-y: auto;
            color: var(--text-dim);
        }

        .speed { display: flex; gap: 0.7rem; align-items: center; margin-top: 0.7rem; font-size: 0.85rem; }
    </style>
</head>
<body>
    <div class="container">
        <header>
            <h1>Omega Tanks</h1>
            <p class="subtitle">Program your tank. Destroy the pink enemy before it destroys you.</p>
        </header>

        <div class="layout">
            <div>
                <div class="card">
                    <canvas id="board" width="{{ grid * cell }}" height="{{ grid * cell }}"></canvas>
                </div>
                <div class="card">
                    <div class="controls">
                        <button class="btn" onclick="stepOnce()">Step</button>
                        <button class="btn btn-primary" id="runBtn" onclick="toggleRun()">Run</button>
                        <button class="btn" onclick="resetAll()">Reset</button>
                    </div>
                    <div class="speed">
                        <label for="speed">Speed</label>
                        <input type="range" id="speed" min="120" max="800" value="{{ tick_ms }}" oninput="setSpeed(this.value)">
                        <span id="speedLabel">{{ tick_ms }} ms/step</span>
                    </div>
                </div>
                <div class="card hud">
                    <div>
                        <div class="label">Player</div>
                        <div class="hp" id="actorHp">HP: 100</div>
                        <div id="actorPos"></div>
                    </div>
                    <div>
                        <div class="label">Enemy</div>
                        <div class="hp" id="enemyHp">HP: 100</div>
                        <div id="enemyPos"></div>
                    </div>
                    <div class="status" id="status">Tick: 0 - Ready.</div>
                </div>
            </div>

            <div>
                <div class="card">
                    <h2>Omega Editor</h2>
                    <select id="examples" onchange="loadExample(this.value)">
                        <option value="">Load example...</option>
                    </select>
                    <textarea id="code" spellcheck="false" oninput="scheduleParse()">{{ default_code }}</textarea>
                    <div class="subtitle" id="parseInfo"></div>
                </div>
                <div class="card">
                    <h2>Log</h2>
                    <div class="log" id="log"></div>
                </div>
            </div>
        </div>
    </div>

    <script>
        const GRID = {{ grid }};
        const CELL = {{ cell }};
        const DIRS = { UP: [0, -1], RIGHT: [1, 0], DOWN: [0, 1], LEFT: [-1, 0] };

        let running = false;
        let speedMs = {{ tick_ms }};
        let timer = null;
        let parseTimer = null;

        const canvas = document.getElementById('board');
        const ctx = canvas.getContext('2d');

        function drawGrid() {
            const size = GRID * CELL;
            ctx.fillStyle = '#070a12';
            ctx.fillRect(0, 0, size, size);
            ctx.strokeStyle = 'rgba(0, 255, 255, 0.25)';
            ctx.lineWidth = 1;
            for (let i = 0; i <= GRID; i++) {
                ctx.beginPath(); ctx.moveTo(0, i * CELL + 0.5); ctx.lineTo(size, i * CELL + 0.5); ctx.stroke();
                ctx.beginPath(); ctx.moveTo(i * CELL + 0.5, 0); ctx.lineTo(i * CELL + 0.5, size); ctx.stroke();
            }
        }

        function drawTank(t, color) {
            const x = t.x * CELL, y = t.y * CELL;
            ctx.shadowBlur = 12;
            ctx.shadowColor = color;
            ctx.strokeStyle = color;
            ctx.lineWidth = 2;
            ctx.strokeRect(x + 4, y + 4, CELL - 8, CELL - 8);

            const cx = x + CELL / 2, cy = y + CELL / 2;
            const d = DIRS[t.facing];
            ctx.beginPath();
            ctx.moveTo(cx, cy);
            ctx.lineTo(cx + d[0] * (CELL / 2 - 4), cy + d[1] * (CELL / 2 - 4));
            ctx.stroke();

            ctx.shadowBlur = 0;
            ctx.fillStyle = '#00ffaa';
            ctx.fillRect(x + 4, y + CELL - 6, Math.max(0, Math.min(1, t.health / 100)) * (CELL - 8), 2);
        }

        function render(state) {
            const w = state.world;
            drawGrid();
            drawTank(w.actor, '#00e5ff');
            drawTank(w.opponent, '#ff2ad1');
            document.getElementById('actorHp').textContent = 'HP: ' + w.actor.health;
            document.getElementById('enemyHp').textContent = 'HP: ' + w.opponent.health;
            document.getElementById('actorPos').textContent = `(${w.actor.x},${w.actor.y}) ${w.actor.facing}`;
            document.getElementById('enemyPos').textContent = `(${w.opponent.x},${w.opponent.y}) ${w.opponent.facing}`;
            document.getElementById('status').textContent = `Tick: ${w.tick} - ${w.message || 'Ready.'}`;
            const log = document.getElementById('log');
            log.innerHTML = state.logs.slice(-50).map(l => `<div>${l.replace(/</g, '&lt;')}</div>`).join('');
            log.scrollTop = log.scrollHeight;
        }

        async function post(url, body) {
            const response = await fetch(url, {
                method: 'POST',
                headers: { 'Content-Type': 'application/json' },
                body: JSON.stringify(body || {}),
            });
            return response.json();
        }

        async function stepOnce() {
            const state = await post('/api/step');
            render(state);
            if (state.over) pause();
        }

        // One request in flight at a time; the next tick is scheduled after it returns
        async function loop() {
            if (!running) return;
            await stepOnce();
            if (running) timer = setTimeout(loop, speedMs);
        }

        function toggleRun() {
            if (running) { pause(); return; }
            running = true;
            document.getElementById('runBtn').textContent = 'Pause';
            document.getElementById('runBtn').className = 'btn btn-warning';
            loop();
        }

        function pause() {
            running = false;
            clearTimeout(timer);
            document.getElementById('runBtn').textContent = 'Run';
            document.getElementById('runBtn').className = 'btn btn-primary';
        }

        async function resetAll() {
            pause();
            render(await post('/api/reset'));
        }

        function setSpeed(value) {
            speedMs = parseInt(value);
            document.getElementById('speedLabel').textContent = speedMs + ' ms/step';
        }

        function scheduleParse() {
            clearTimeout(parseTimer);
            parseTimer = setTimeout(sendProgram, 300);
        }

        async function sendProgram() {
            const data = await post('/api/program', { source: document.getElementById('code').value });
            if (data.success) {
                const fns = Object.keys(data.functions);
                document.getElementById('parseInfo').textContent =
                    `${data.statements.length} statements, ${fns.length} functions` + (fns.length ? ` (${fns.join(', ')})` : '');
            }
        }

        async function loadExample(name) {
            if (!name) return;
            const examples = await (await fetch('/api/examples')).json();
            document.getElementById('code').value = examples[name];
            await sendProgram();
        }

        async function init() {
            const examples = await (await fetch('/api/examples')).json();
            const select = document.getElementById('examples');
            Object.keys(examples).forEach(name => {
                const opt = document.createElement('option');
                opt.value = name;
                opt.textContent = name;
                select.appendChild(opt);
            });
            render(await (await fetch('/api/state')).json());
            sendProgram();
        }

        init();
    </script>
</body>
</html>
"""


def add_log(message: str):
    """Append a timestamped line to the bounded in-memory log."""
    stamp = datetime.now().strftime("%H:%M:%S")
    logs = current_game["logs"]
    logs.append(f"[{stamp}] {message}")
    del logs[:-MAX_LOGS]


def describe_program(program: Program) -> dict:
    return {
        "statements": [str(stmt) for stmt in program.top_level],
        "functions": {
            name: [str(stmt) for stmt in body]
            for name, body in program.functions.items()
        },
        "normalized": program_to_string(program),
    }


def game_state() -> dict:
    state = current_game["simulation"].snapshot()
    state["logs"] = list(current_game["logs"])
    return state


def _json_body() -> Optional[dict]:
    """The request's JSON object; {} for an empty body, None if the body is not a JSON object."""
    if not request.get_data():
        return {}
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@app.route('/')
def index():
    return render_template_string(
        HTML_TEMPLATE,
        grid=GRID_SIZE,
        cell=CELL_SIZE,
        tick_ms=config.tick_ms,
        default_code=current_game["source"],
    )


@app.route('/api/state')
def api_state():
    """Get the current world and runtime."""
    with _state_lock:
        return jsonify(game_state())


@app.route('/api/examples')
def api_examples():
    """Bundled example programs by name."""
    return jsonify(PROGRAMS)


@app.route('/api/program', methods=['POST'])
def api_program():
    """Re-parse the editor text. The running match keeps its world and runtime."""
    data = _json_body()
    if data is None or not isinstance(data.get("source"), str):
        return jsonify({"success": False, "error": "Expected JSON body with a 'source' string"}), 400

    program = parse_program(data["source"])
    with _state_lock:
        current_game["source"] = data["source"]
        current_game["simulation"].load(program)
        add_log(f"Program loaded: {len(program.top_level)} statements, "
                f"{len(program.functions)} functions")

    return jsonify({"success": True, **describe_program(program)})


@app.route('/api/step', methods=['POST'])
def api_step():
    """Advance the match by one tick."""
    with _state_lock:
        simulation = current_game["simulation"]
        was_over = simulation.is_over()
        executed = simulation.tick()

        if not was_over:
            add_log(f"Tick {simulation.world.tick}: {simulation.world.message or '(idle)'}")
            if simulation.is_over():
                add_log("Match over")

        state = game_state()
    state["executed"] = executed
    return jsonify(state)


@app.route('/api/reset', methods=['POST'])
def api_reset():
    """Reset world and runtime; optionally replace the program at the same time."""
    data = _json_body()
    if data is None:
        return jsonify({"success": False, "error": "Expected an empty body or a JSON object"}), 400
    source = data.get("source")
    if source is not None and not isinstance(source, str):
        return jsonify({"success": False, "error": "'source' must be a string"}), 400

    with _state_lock:
        simulation = current_game["simulation"]
        if source is not None:
            current_game["source"] = source
            simulation.load(parse_program(source))
        simulation.reset()
        current_game["logs"] = []
        add_log("Reset")
        return jsonify(game_state())


if __name__ == '__main__':
    port = config.port
    print("\n" + "="*50)
    print("Omega Tanks - Web Interface")
    print("="*50)
    print(f"\nOpen in your browser: http://localhost:{port}")
    print("\nPress Ctrl+C to stop\n")

    app.run(host='0.0.0.0', port=port, debug=False)
