from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from core.reporting.contexts import WorkbookContext
from core.reporting.renderers.ledger_csv import LEDGER_HEADERS


class WorkbookRenderer:
    def render(self, ctx: WorkbookContext, output_path: Path) -> Path:
        wb = Workbook()

        header_font = Font(bold=True)
        title_font = Font(bold=True, size=14)
        warn_font = Font(bold=True, color="B00020")
        center = Alignment(horizontal="center")
        thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )
        header_fill = PatternFill("solid", fgColor="DDDDDD")
        snap = ctx.snapshot

        def header_row(ws, headers):
            for col_index, h in enumerate(headers, start=1):
                cell = ws.cell(row=1, column=col_index, value=h)
                cell.font = header_font
                cell.alignment = center
                cell.fill = header_fill
                cell.border = thin_border

        # ---------------- Summary ----------------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = f"Workspace summary - {ctx.as_of.isoformat()}"
        ws["A1"].font = title_font

        row = 3

        def kv(key, value, warn=False):
            nonlocal row
            ws[f"A{row}"] = key
            ws[f"B{row}"] = value
            ws[f"A{row}"].font = header_font
            ws[f"A{row}"].border = thin_border
            ws[f"B{row}"].border = thin_border
            if warn:
                ws[f"B{row}"].font = warn_font
            row += 1

        kv(f"Total revenue ({ctx.currency})", round(snap.total_revenue, 2))
        kv(f"Net revenue ({ctx.currency})", round(snap.net_revenue, 2))
        kv("Total hours", round(snap.total_hours, 2))
        kv("Billable hours", round(snap.billable_hours, 2))
        kv("Average hourly rate", round(snap.avg_hourly_rate, 2))
        kv("Active clients", snap.client_count)

        row += 1
        for card in snap.performance.cards():
            kv(card.title, card.value, warn=card.warn)

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 20

        # ---------------- Sessions ----------------
        ws_sessions = wb.create_sheet("Sessions")
        header_row(ws_sessions, LEDGER_HEADERS)
        for r, entry in enumerate(ctx.ledger, start=2):
            values = [
                entry.date.isoformat(),
                entry.client,
                entry.task,
                entry.tags,
                entry.duration,
                "Yes" if entry.billable else "No",
                entry.revenue,
                entry.allocation,
                entry.project,
            ]
            for c, v in enumerate(values, start=1):
                ws_sessions.cell(r, c, v).border = thin_border

        ws_sessions.column_dimensions["A"].width = 12
        ws_sessions.column_dimensions["B"].width = 26
        ws_sessions.column_dimensions["C"].width = 36
        ws_sessions.column_dimensions["D"].width = 24
        for col_letter in ("E", "F", "G", "H", "I"):
            ws_sessions.column_dimensions[col_letter].width = 14

        # ---------------- Clients ----------------
        ws_clients = wb.create_sheet("Clients")
        header_row(ws_clients, ["Client", "Status", "Model", "Rate", "Revenue", "Hours", "Share (%)", "Utilization (%)"])
        rankings = {r.client_id: r for r in snap.client_rankings}
        for r, client in enumerate(sorted(ctx.clients, key=lambda c: c.name.lower()), start=2):
            ranking = rankings.get(client.id)
            values = [
                client.name,
                client.status.value,
                client.model.value,
                client.rate,
                ranking.revenue if ranking else 0.0,
                ranking.hours if ranking else 0.0,
                ranking.share if ranking else "",
                ranking.utilization if ranking else "",
            ]
            for c, v in enumerate(values, start=1):
                ws_clients.cell(r, c, v).border = thin_border

        ws_clients.column_dimensions["A"].width = 28
        for col_letter in ("B", "C", "D", "E", "F", "G", "H"):
            ws_clients.column_dimensions[col_letter].width = 15

        # ---------------- Signals ----------------
        ws_signals = wb.create_sheet("Signals")
        header_row(ws_signals, ["Type", "Client", "Impact", "Message"])
        for r, signal in enumerate(snap.forward_signals, start=2):
            for c, v in enumerate([signal.type, signal.client_name, signal.impact, signal.message], start=1):
                ws_signals.cell(r, c, v).border = thin_border

        ws_signals.column_dimensions["A"].width = 12
        ws_signals.column_dimensions["B"].width = 26
        ws_signals.column_dimensions["C"].width = 10
        ws_signals.column_dimensions["D"].width = 60

        wb.save(output_path)
        return output_path
