"""Report outputs: versioned JSON payload, HTML page, console text and CSV."""

from __future__ import annotations

import csv
import html
import json
import logging
from pathlib import Path
from typing import Dict, List, TextIO, Union

from .aggregator import AggregationSnapshot, Dimension
from .summarizer import format_total, summarize

logger = logging.getLogger(__name__)

REPORT_SCHEMA_VERSION = 1
SUMMARY_CSV_HEADER = ("dimension", "key", "total", "percent")
NO_PACKETS_MESSAGE = "No TCP/UDP packets found to analyze."

NO_DATA_HTML = (
    "<html><body><h1>No data to display.</h1>"
    "<p>The capture file contained no packets or all packets were filtered by the blacklist.</p>"
    "</body></html>"
)


def build_report_payload(snapshot: AggregationSnapshot) -> Dict[str, object]:
    """Stable, versioned view of *snapshot* for report consumers."""
    data: Dict[str, Dict[str, List[Dict[str, int]]]] = {}
    for dimension, table in snapshot.items():
        data[dimension.report_name] = {
            key: [{"t": obs.timestamp, "v": obs.value} for obs in series]
            for key, series in table.items()
        }
    return {
        "version": REPORT_SCHEMA_VERSION,
        "unit": snapshot.mode.value,
        "data": data,
    }


def render_html(snapshot: AggregationSnapshot) -> str:
    if snapshot.is_empty():
        return NO_DATA_HTML

    payload = json.dumps(build_report_payload(snapshot), separators=(",", ":"))
    # keep "</script>" inside keys from closing the script element
    payload = payload.replace("</", "<\\/")
    titles = json.dumps({dimension.report_name: dimension.title for dimension in Dimension})
    radios = "\n".join(
        f'        <label><input type="radio" name="grouping" value="{dimension.report_name}"'
        f'{" checked" if dimension is Dimension.flow else ""}> {html.escape(dimension.title)}</label>'
        for dimension in Dimension
    )
    return (
        _HTML_TEMPLATE.replace("__RADIOS__", radios)
        .replace("__TITLES__", titles)
        .replace("__REPORT__", payload)
    )


def write_html_report(snapshot: AggregationSnapshot, path: Union[str, Path]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_html(snapshot), encoding="utf-8")
    logger.debug("Wrote HTML report to %s", target)
    return target


def render_console(snapshot: AggregationSnapshot, stream: TextIO) -> None:
    rows = summarize(snapshot.table(Dimension.flow))
    if rows is None:
        stream.write(NO_PACKETS_MESSAGE + "\n")
        return

    stream.write(f"\n--- Console Results (Grouped by Flow, Mode: {snapshot.mode.value}) ---\n")
    for row in rows:
        stream.write(f"\nFlow {row.key} : {format_total(row.total)} ({row.percent_label} of total)\n")


def write_summary_csv(snapshot: AggregationSnapshot, path: Union[str, Path]) -> int:
    """Write summary rows for every dimension; returns the number of data rows."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with target.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(SUMMARY_CSV_HEADER)
        for dimension, table in snapshot.items():
            rows = summarize(table)
            if rows is None:
                continue
            for row in rows:
                writer.writerow((dimension.report_name, row.key, row.total, f"{row.percent:.2f}"))
                written += 1
    return written


_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Capture Traffic Histogram</title>
    <script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
    <script src="https://cdn.jsdelivr.net/npm/chartjs-adapter-date-fns/dist/chartjs-adapter-date-fns.bundle.min.js"></script>
    <script src="https://cdn.jsdelivr.net/npm/chartjs-plugin-zoom@2.0.1/dist/chartjs-plugin-zoom.min.js"></script>
    <style>
        body { font-family: -apple-system, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; margin: 0; background: #f6f7f9; color: #222; }
        main { max-width: 1200px; margin: 2rem auto; padding: 2rem; background: #fff; border-radius: 6px; box-shadow: 0 2px 6px rgba(0,0,0,0.08); }
        h1, h2 { text-align: center; }
        .controls { display: flex; flex-wrap: wrap; justify-content: center; gap: 1.25rem; margin: 1.5rem 0; }
        .controls label { cursor: pointer; }
        .table-wrap { max-height: 600px; overflow-y: auto; border: 1px solid #dde; border-radius: 6px; }
        table { width: 100%; border-collapse: collapse; }
        th, td { padding: 10px 14px; text-align: left; border-bottom: 1px solid #eee; }
        th { background: #f6f7f9; position: sticky; top: 0; }
        td.num { text-align: right; font-family: monospace; }
        tbody tr { cursor: pointer; }
        tbody tr:hover { background: #eef1f5; }
        tbody tr.active { background: #d8e8fb; }
        #detail { display: none; margin-top: 2.5rem; border-top: 1px solid #dde; padding-top: 1rem; }
        #detail header { display: flex; justify-content: center; align-items: center; gap: 1rem; }
    </style>
</head>
<body>
<main>
    <h1>Traffic Analysis</h1>
    <div class="controls">
__RADIOS__
    </div>
    <h2 id="tableTitle"></h2>
    <div class="table-wrap"><table id="summary"><thead></thead><tbody></tbody></table></div>
    <section id="detail">
        <header><h2 id="detailTitle"></h2><button id="resetZoom">Reset Zoom</button></header>
        <canvas id="detailChart"></canvas>
    </section>
</main>
<script>
    const report = __REPORT__;
    const titles = __TITLES__;
    const unit = report.unit;
    let chart = null;

    function groupedRows(name) {
        const table = report.data[name];
        return Object.keys(table).map(key => {
            const series = table[key];
            return { key, series, total: series.reduce((sum, o) => sum + o.v, 0) };
        }).sort((a, b) => (b.total - a.total) || (a.key < b.key ? -1 : a.key > b.key ? 1 : 0));
    }

    function updateView() {
        const name = document.querySelector('input[name="grouping"]:checked').value;
        const rows = groupedRows(name);
        const grand = rows.reduce((sum, r) => sum + r.total, 0);
        document.getElementById('tableTitle').innerText = 'Traffic by ' + titles[name];
        const table = document.getElementById('summary');
        table.querySelector('thead').innerHTML =
            '<tr><th>' + titles[name] + '</th><th>Total (' + unit + ')</th><th>% of Grand Total</th></tr>';
        const body = table.querySelector('tbody');
        body.innerHTML = '';
        rows.forEach(row => {
            const tr = document.createElement('tr');
            const pct = grand > 0 ? (row.total / grand * 100).toFixed(2) : '0.00';
            [row.key, row.total.toLocaleString(), pct + '%'].forEach((text, i) => {
                const td = document.createElement('td');
                td.textContent = text;
                if (i > 0) td.className = 'num';
                tr.appendChild(td);
            });
            tr.onclick = () => {
                body.querySelectorAll('tr').forEach(r => r.classList.remove('active'));
                tr.classList.add('active');
                showDetail(name, row);
            };
            body.appendChild(tr);
        });
        document.getElementById('detail').style.display = 'none';
        if (chart) { chart.destroy(); chart = null; }
    }

    function showDetail(name, row) {
        document.getElementById('detail').style.display = 'block';
        document.getElementById('detailTitle').innerText = 'Traffic Over Time for ' + titles[name] + ': ' + row.key;
        if (chart) { chart.destroy(); }
        chart = new Chart(document.getElementById('detailChart').getContext('2d'), {
            type: 'line',
            data: { datasets: [{
                label: 'Traffic (' + unit + ')',
                data: row.series.map(o => ({ x: o.t, y: o.v })),
                borderColor: 'rgb(54, 140, 200)',
                tension: 0.1,
                pointRadius: 0
            }] },
            options: {
                responsive: true,
                scales: {
                    x: { type: 'time', time: { unit: 'second' } },
                    y: { beginAtZero: true }
                },
                plugins: {
                    legend: { display: false },
                    zoom: {
                        pan: { enabled: true, mode: 'x' },
                        zoom: { wheel: { enabled: true }, pinch: { enabled: true }, mode: 'x' }
                    }
                }
            }
        });
        document.getElementById('detail').scrollIntoView({ behavior: 'smooth' });
    }

    document.querySelectorAll('input[name="grouping"]').forEach(el => el.addEventListener('change', updateView));
    document.getElementById('resetZoom').addEventListener('click', () => { if (chart) chart.resetZoom(); });
    document.addEventListener('DOMContentLoaded', updateView);
</script>
</body>
</html>
"""


__all__ = [
    "REPORT_SCHEMA_VERSION",
    "NO_PACKETS_MESSAGE",
    "NO_DATA_HTML",
    "build_report_payload",
    "render_html",
    "write_html_report",
    "render_console",
    "write_summary_csv",
]
