# Copyright (c) 2026, School Portal contributors
# For license information, please see license.txt

"""
Schedule Override DocType

Edición del horario de un usuario para una fecha:
- Reemplaza el rango start_time-end_time del horario base
- El override más reciente gana sobre los anteriores
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import get_time


class ScheduleOverride(Document):
	"""
	Schedule Override with validations.

	Validations:
	- user, bell_schedule, date, label required
	- start_time < end_time
	- Warn when it overlaps other overrides for same user/schedule/date
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.
		"""
		self._validate_required_fields()
		self._validate_times()
		self._check_overlapping_overrides()

	def _validate_required_fields(self) -> None:
		"""Valida campos requeridos."""
		for fieldname, fieldlabel in (
			("user", "User"),
			("bell_schedule", "Bell Schedule"),
			("date", "Date"),
			("label", "Label"),
			("start_time", "Start Time"),
			("end_time", "End Time"),
		):
			if not self.get(fieldname):
				frappe.throw(_(f"{fieldlabel} es requerido"))

	def _validate_times(self) -> None:
		"""Valida que start_time < end_time."""
		start = get_time(self.start_time)
		end = get_time(self.end_time)

		if start >= end:
			frappe.throw(
				_(f"Start Time ({start.strftime('%H:%M')}) debe ser menor que End Time ({end.strftime('%H:%M')})")
			)

	def _check_overlapping_overrides(self) -> None:
		"""
		Advierte si este override se solapa con otros del mismo usuario y fecha.
		No bloquea: el override más reciente reemplaza el rango solapado.
		"""
		filters = {
			"user": self.user,
			"bell_schedule": self.bell_schedule,
			"date": self.date,
			"name": ["!=", self.name] if self.name else ["is", "set"]
		}

		existing = frappe.get_all(
			"Schedule Override",
			filters=filters,
			fields=["name", "label", "start_time", "end_time"]
		)

		new_start = get_time(self.start_time)
		new_end = get_time(self.end_time)

		for other in existing:
			other_start = get_time(other.start_time)
			other_end = get_time(other.end_time)

			if new_start < other_end and new_end > other_start:
				frappe.msgprint(
					_(f"Este override ({new_start.strftime('%H:%M')}-{new_end.strftime('%H:%M')}) "
					  f"se solapa con {other.name} ({other.label}, {other_start.strftime('%H:%M')}-{other_end.strftime('%H:%M')})"),
					indicator="orange",
					alert=True
				)
