"""
Flow report rendering (HTML and plain text) with Jinja2.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader

from models.flow import RequestNode
from models.ledger import BalanceSummary
from procurement import display
from procurement.flow_tree import count_nodes

# Default HTML report template
DEFAULT_FLOW_REPORT_TEMPLATE = """\
<!DOCTYPE html>
<!--
  Flow report template — edit config/flow_report.html.j2 to customise.
  Template engine : Jinja2  (https://jinja.palletsprojects.com/)
  Values are HTML-escaped automatically.

  Variables:
    request       — root RequestNode (record + sub_requests)
    summaries     — dict: sub-request id -> BalanceSummary
    node_count    — number of nodes in the tree
    generated_at  — ISO-8601 UTC timestamp
  Functions:
    display(table, key) -> {label, color}
-->
<html>
<head>
  <meta charset="utf-8">
  <title>{{ request.record.request_number }} — Flow</title>
</head>
<body>
  {% set r = request.record %}
  <h1>{{ r.request_number }}{% if r.title %} · {{ r.title }}{% endif %}</h1>
  <p>
    <span style="color: {{ r.status_color or "#9CA3AF" }}">{{ r.status or "Unknown" }}</span>
    {% if r.priority %} · priority {{ r.priority }}{% endif %}
    {% if r.request_date %} · {{ r.request_date }}{% endif %}
  </p>

  {% if not request.sub_requests %}
  <p><em>No sub-requests yet.</em></p>
  {% endif %}

  <ul class="flow">
  {% for sub in request.sub_requests %}
    {% set s = sub.record %}
    {% set route = display("route", s.route_type) %}
    <li class="sub-request">
      <strong>{{ s.request_number or s.id }}</strong>
      {% if s.line_name %}{{ s.line_name }}{% endif %}
      <span style="color: {{ route.color }}">[{{ route.label }}]</span>
      {% set bal = summaries.get(s.id) %}
      {% if bal %}
      <div class="balance">
        Money in {{ "%.2f"|format(bal.total_money_in) }} EUSD ·
        {% if s.route_type == "po" %}Committed{% else %}Spent{% endif %} {{ "%.2f"|format(bal.total_spent) }} EUSD ·
        Balance <span{% if bal.is_overdrawn %} style="color: #ef4444"{% endif %}>{{ "%.2f"|format(bal.balance_in_hand) }}</span> EUSD
      </div>
      {% endif %}
      <ul>
      {% for po in sub.purchase_orders %}
        {% set pst = display("po", po.record.status) %}
        <li class="po">
          PO {{ po.record.po_number or po.record.id }}
          <span style="color: {{ pst.color }}">{{ pst.label }}</span>
          {% if po.record.supplier_name %} · {{ po.record.supplier_name }}{% endif %}
          <ul>
          {% for inv in po.invoices %}
            {% set ist = display("invoice", "voided" if inv.record.is_voided else inv.record.status) %}
            <li class="invoice">
              Invoice {{ inv.record.invoice_number or inv.record.id }}
              <span style="color: {{ ist.color }}">{{ ist.label }}</span>
              <ul>
              {% for st in inv.stock_transactions %}
                {% set mv = display("movement", st.record.movement_type) %}
                <li class="stock">{{ mv.label }}{% if st.record.quantity is not none %} × {{ st.record.quantity }}{% endif %} · {{ st.record.transaction_date or "" }}</li>
              {% endfor %}
              </ul>
            </li>
          {% endfor %}
          </ul>
        </li>
      {% endfor %}
      {% for ft in sub.financial_transactions %}
        {% set tt = display("transaction", ft.record.transaction_type) %}
        <li class="financial">
          {{ tt.label }}{% if ft.record.amount_eusd is not none %} {{ "%.2f"|format(ft.record.amount_eusd) }} EUSD{% endif %}
          {% if ft.record.is_voided %}<s>voided</s>{% endif %}
        </li>
      {% endfor %}
      {% for sor in sub.stock_out_requests %}
        <li class="stock-out-request">Stock-out request {{ sor.record.request_number or sor.record.id }} · {{ sor.record.status or "" }}</li>
      {% endfor %}
      {% for st in sub.stock_transactions %}
        {% set mv = display("movement", st.record.movement_type) %}
        <li class="stock">{{ mv.label }}{% if st.record.quantity is not none %} × {{ st.record.quantity }}{% endif %} · {{ st.record.transaction_date or "" }}</li>
      {% endfor %}
      </ul>
    </li>
  {% endfor %}
  </ul>

  <footer>{{ node_count }} nodes · generated {{ generated_at }}</footer>
</body>
</html>
"""

_DISPLAY_TABLES = {
    "route": display.ROUTE_TYPE_DISPLAY,
    "po": display.PO_STATUS_DISPLAY,
    "invoice": display.INVOICE_STATUS_DISPLAY,
    "movement": display.MOVEMENT_TYPE_DISPLAY,
    "transaction": display.TRANSACTION_TYPE_DISPLAY,
    "severity": display.STOCK_SEVERITY_DISPLAY,
    "auto": display.AUTO_STATUS_DISPLAY,
}


def _display(table: str, key: Optional[str]) -> dict:
    return display.display_for(_DISPLAY_TABLES[table], key)


def build_report_payload(
    tree: RequestNode,
    summaries: Optional[dict[str, BalanceSummary]] = None,
) -> dict:
    return {
        "request": tree,
        "summaries": summaries or {},
        "node_count": count_nodes(tree),
        "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
    }


def render_flow_report(payload: dict, template_file: Path | None = None) -> str:
    """
    Render *payload* as HTML using the operator template (or built-in default).

    Args:
        payload: from build_report_payload()
        template_file: Optional path to custom Jinja2 template file
    """
    if template_file and template_file.exists():
        env = Environment(
            loader=FileSystemLoader(str(template_file.parent)),
            autoescape=True,
            keep_trailing_newline=True,
        )
        env.globals["display"] = _display
        tmpl = env.get_template(template_file.name)
    else:
        env = Environment(loader=BaseLoader(), autoescape=True, keep_trailing_newline=True)
        env.globals["display"] = _display
        tmpl = env.from_string(DEFAULT_FLOW_REPORT_TEMPLATE)
    return tmpl.render(**payload)


def render_flow_text(tree: RequestNode, summaries: Optional[dict[str, BalanceSummary]] = None) -> str:
    """Indented plain-text outline of the tree, one node per line."""
    summaries = summaries or {}
    lines: list[str] = []

    def _label(node) -> str:
        rec = node.record
        if node.kind == "request":
            return f"{rec.request_number}  {rec.title or ''}  [{rec.status or 'Unknown'}]".rstrip()
        if node.kind == "sub_request":
            text = f"{rec.request_number or rec.id}  {rec.line_name or ''}  ({rec.route_type})"
            bal = summaries.get(rec.id)
            if bal is not None:
                text += f"  balance {bal.balance_in_hand:.2f} EUSD"
            return text
        if node.kind == "purchase_order":
            return f"PO {rec.po_number or rec.id}  [{_display('po', rec.status)['label']}]"
        if node.kind == "invoice":
            status = "voided" if rec.is_voided else rec.status
            return f"Invoice {rec.invoice_number or rec.id}  [{_display('invoice', status)['label']}]"
        if node.kind == "financial_transaction":
            amount = f" {rec.amount_eusd:.2f} EUSD" if rec.amount_eusd is not None else ""
            voided = " (voided)" if rec.is_voided else ""
            return f"{_display('transaction', rec.transaction_type)['label']}{amount}{voided}"
        if node.kind == "stock_out_request":
            return f"Stock-out request {rec.request_number or rec.id}  [{rec.status or ''}]"
        qty = f" x {rec.quantity:g}" if rec.quantity is not None else ""
        return f"{_display('movement', rec.movement_type)['label']}{qty}  {rec.transaction_date or ''}".rstrip()

    def _walk(node, depth: int) -> None:
        lines.append("  " * depth + ("└─ " if depth else "") + _label(node))
        for child in node.children:
            _walk(child, depth + 1)

    _walk(tree, 0)
    return "\n".join(lines)
