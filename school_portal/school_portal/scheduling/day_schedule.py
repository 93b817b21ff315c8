"""
Day Schedule Service

Builds a user's schedule for one day, considering:
- Bell Schedules (weekly templates of periods)
- Schedule Overrides (user edits, oldest first)
- Timezones
"""

import frappe
from frappe.utils import getdate, get_time, get_system_timezone
from datetime import datetime, time, timedelta, date
from typing import List, Dict, Union, Optional, Any
import pytz

from .composition import Block, ScheduleValidationError, compose, merge_adjacent


DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _to_time(time_value: Union[time, timedelta, str]) -> time:
	"""
	Convierte diferentes formatos de tiempo a datetime.time.

	Args:
		time_value: puede ser time, timedelta (desde medianoche), o string

	Returns:
		datetime.time object
	"""
	if isinstance(time_value, time):
		return time_value
	elif isinstance(time_value, timedelta):
		# timedelta representa tiempo desde medianoche
		return (datetime.min + time_value).time()
	elif isinstance(time_value, str):
		return get_time(time_value)
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


def _localize(target_date: date, time_value: Union[time, timedelta, str], tz: pytz.tzinfo.BaseTzInfo) -> datetime:
	"""Combina fecha y hora en un datetime con timezone."""
	value = datetime.combine(target_date, _to_time(time_value))
	return tz.localize(value) if value.tzinfo is None else value


def get_timezone(schedule: Any) -> pytz.tzinfo.BaseTzInfo:
	"""
	Obtiene el timezone de un Bell Schedule.

	Args:
		schedule: Bell Schedule doc

	Returns:
		pytz timezone, UTC si el nombre no es válido
	"""
	tz_name = schedule.timezone or "UTC"
	if tz_name == "system timezone":
		tz_name = get_system_timezone()

	try:
		return pytz.timezone(tz_name)
	except pytz.UnknownTimeZoneError:
		frappe.log_error(
			title="Get Day Schedule",
			message=f"Invalid timezone '{tz_name}' for Bell Schedule {schedule.name}, using UTC"
		)
		return pytz.UTC


def get_base_blocks(
	bell_schedule: Union[str, Any],
	target_date: Union[date, str],
	tz: Optional[pytz.tzinfo.BaseTzInfo] = None
) -> List[Block]:
	"""
	Obtiene los periodos del Bell Schedule para un día específico.

	Args:
		bell_schedule: nombre del Bell Schedule o doc
		target_date: fecha (date object o string YYYY-MM-DD)
		tz: timezone a usar (por defecto el del Bell Schedule)

	Returns:
		list[Block]: periodos del día, en el orden de la tabla

	Algoritmo:
		1. Verificar que el schedule esté activo y vigente
		2. Obtener weekday del date (Monday, Tuesday, etc.)
		3. Filtrar periodos de ese weekday
		4. Convertir time a datetime con timezone del schedule
	"""
	if isinstance(bell_schedule, str):
		schedule = frappe.get_doc("Bell Schedule", bell_schedule)
	else:
		schedule = bell_schedule

	if isinstance(target_date, str):
		target_date = getdate(target_date)

	if not schedule.is_active:
		return []

	# Verificar vigencia del schedule
	if schedule.valid_from and target_date < getdate(schedule.valid_from):
		return []
	if schedule.valid_to and target_date > getdate(schedule.valid_to):
		return []

	if tz is None:
		tz = get_timezone(schedule)

	weekday_name = target_date.strftime("%A")
	blocks = []

	for period in schedule.periods or []:
		if period.get("weekday") != weekday_name:
			continue

		blocks.append(Block(
			period.get("label"),
			_localize(target_date, period.get("start_time"), tz),
			_localize(target_date, period.get("end_time"), tz)
		))

	return blocks


def get_override_blocks(
	user: str,
	bell_schedule: str,
	target_date: Union[date, str],
	tz: pytz.tzinfo.BaseTzInfo
) -> List[Block]:
	"""
	Obtiene los Schedule Overrides de un usuario para una fecha.

	Args:
		user: usuario dueño de los overrides
		bell_schedule: nombre del Bell Schedule
		target_date: fecha
		tz: timezone del Bell Schedule

	Returns:
		list[Block]: overrides del más antiguo al más reciente
	"""
	if isinstance(target_date, str):
		target_date = getdate(target_date)

	# El orden de creación define la prioridad: el último gana
	overrides = frappe.get_all(
		"Schedule Override",
		filters={
			"user": user,
			"bell_schedule": bell_schedule,
			"date": target_date
		},
		fields=["name", "label", "start_time", "end_time"],
		order_by="creation asc"
	)

	return [
		Block(
			override.get("label"),
			_localize(target_date, override.get("start_time"), tz),
			_localize(target_date, override.get("end_time"), tz)
		)
		for override in overrides
	]


def get_day_schedule(
	user: str,
	bell_schedule: str,
	target_date: Union[date, str],
	merge: bool = False
) -> List[Dict[str, str]]:
	"""
	Obtiene el horario efectivo de un usuario para un día.

	Args:
		user: usuario
		bell_schedule: nombre del Bell Schedule
		target_date: fecha (date object o string YYYY-MM-DD)
		merge: unir bloques contiguos con el mismo label

	Returns:
		list[dict]: [
			{
				"label": "Chemistry",
				"start": "2026-01-15 08:00:00",
				"end": "2026-01-15 08:45:00"
			},
			...
		]

	Raises:
		ScheduleValidationError: si un periodo u override tiene horas inválidas
	"""
	if isinstance(target_date, str):
		target_date = getdate(target_date)

	schedule = frappe.get_doc("Bell Schedule", bell_schedule)
	tz = get_timezone(schedule)

	base = get_base_blocks(schedule, target_date, tz)
	overrides = get_override_blocks(user, schedule.name, target_date, tz)

	try:
		timeline = compose(base, overrides)
	except ScheduleValidationError as e:
		frappe.log_error(
			title="Get Day Schedule",
			message=f"Cannot compose schedule for {user} on {target_date} ({schedule.name}): {e}"
		)
		raise

	if merge:
		timeline = merge_adjacent(timeline)

	frappe.logger("school_portal").debug(
		f"Day schedule for {user} on {target_date}: "
		f"{len(base)} periods, {len(overrides)} overrides, {len(timeline)} blocks"
	)

	return [
		{
			"label": block.label,
			"start": block.start.strftime(DATETIME_FORMAT),
			"end": block.end.strftime(DATETIME_FORMAT)
		}
		for block in timeline
	]
