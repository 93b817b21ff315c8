# Copyright (c) 2026, School Portal contributors
# For license information, please see license.txt

"""
Bell Schedule DocType

Plantilla semanal de periodos (horario base).
Define los periodos de clase por día de semana.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import getdate, get_time
from typing import List, Dict, Any, Tuple


class BellSchedule(Document):
	"""
	Bell Schedule with validation for periods.

	Validations:
	- schedule_name required
	- valid_from <= valid_to (if both present)
	- At least one period required
	- Each period: weekday, label, start_time < end_time
	- Overlapping periods on same weekday only warn (later row wins)
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.
		"""
		self._validate_schedule_name()
		self._validate_validity_dates()
		self._validate_periods_exist()
		self._validate_periods_times()
		self._warn_overlapping_periods()

	def _validate_schedule_name(self) -> None:
		"""Valida que schedule_name esté presente."""
		if not self.schedule_name:
			frappe.throw(_("Schedule Name es requerido"))

	def _validate_validity_dates(self) -> None:
		"""Valida que valid_from <= valid_to si ambos están presentes."""
		if self.valid_from and self.valid_to:
			if getdate(self.valid_from) > getdate(self.valid_to):
				frappe.throw(_("Valid From debe ser menor o igual que Valid To"))

	def _validate_periods_exist(self) -> None:
		"""Valida que exista al menos un periodo."""
		if not self.periods:
			frappe.throw(_("Debe agregar al menos un periodo"))

	def _validate_periods_times(self) -> None:
		"""
		Valida que cada periodo tenga weekday, label y start_time < end_time.
		"""
		for idx, period in enumerate(self.periods, 1):
			if not period.weekday:
				frappe.throw(_(f"Fila {idx}: Weekday es requerido"))

			if not period.label:
				frappe.throw(_(f"Fila {idx}: Label es requerido"))

			if not period.start_time or not period.end_time:
				frappe.throw(_(f"Fila {idx}: Start Time y End Time son requeridos"))

			start = get_time(period.start_time)
			end = get_time(period.end_time)

			if start >= end:
				frappe.throw(
					_(f"Fila {idx} ({period.weekday}): Start Time ({start.strftime('%H:%M')}) debe ser menor que End Time ({end.strftime('%H:%M')})")
				)

	def _warn_overlapping_periods(self) -> None:
		"""
		Advierte sobre periodos solapados en el mismo día.
		No bloquea: al componer el horario, la fila posterior gana el rango.
		"""
		rows = [
			{
				"idx": idx,
				"weekday": period.weekday,
				"start": get_time(period.start_time),
				"end": get_time(period.end_time)
			}
			for idx, period in enumerate(self.periods, 1)
		]

		for weekday, first, second in find_overlapping_periods(rows):
			frappe.msgprint(
				_(f"{weekday}: Fila {first['idx']} ({first['start'].strftime('%H:%M')}-{first['end'].strftime('%H:%M')}) "
				  f"se solapa con Fila {second['idx']} ({second['start'].strftime('%H:%M')}-{second['end'].strftime('%H:%M')}). "
				  f"La fila {second['idx']} tendrá prioridad."),
				indicator="orange",
				alert=True
			)


def find_overlapping_periods(
	rows: List[Dict[str, Any]]
) -> List[Tuple[str, Dict[str, Any], Dict[str, Any]]]:
	"""
	Encuentra pares de periodos solapados en el mismo weekday.

	Dos periodos se solapan si:
	- Son del mismo weekday
	- a.start < b.end AND a.end > b.start

	Args:
		rows: [{"idx": int, "weekday": str, "start": time, "end": time}, ...]

	Returns:
		list: [(weekday, fila anterior, fila posterior), ...] ordenado por weekday e idx
	"""
	rows_by_day: Dict[str, List[Dict[str, Any]]] = {}
	for row in rows:
		rows_by_day.setdefault(row["weekday"], []).append(row)

	overlaps = []

	for weekday, day_rows in rows_by_day.items():
		day_rows = sorted(day_rows, key=lambda x: x["idx"])

		for i, first in enumerate(day_rows):
			for second in day_rows[i + 1:]:
				if first["start"] < second["end"] and first["end"] > second["start"]:
					overlaps.append((weekday, first, second))

	return overlaps
