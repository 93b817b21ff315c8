"""
Scheduled Tasks

Background tasks that run periodically:
- cleanup_stale_overrides: Deletes Schedule Overrides past the retention window
"""

import frappe
from frappe.utils import add_days, cint, getdate, nowdate


DEFAULT_RETENTION_DAYS = 30


def cleanup_stale_overrides() -> int:
	"""
	Elimina Schedule Overrides de fechas ya pasadas.
	Se ejecuta diariamente (configurado en hooks.py).

	Algoritmo:
		1. Leer schedule_override_retention_days de site_config (default 30)
		2. Buscar Schedule Overrides con date < hoy - retention_days
		3. Eliminar cada uno; si uno falla, continuar con los demás
		4. Log cantidad eliminada

	Returns:
		int: Cantidad de overrides eliminados
	"""
	retention_days = cint(
		frappe.conf.get("schedule_override_retention_days") or DEFAULT_RETENTION_DAYS
	)
	cutoff = add_days(getdate(nowdate()), -retention_days)

	stale_overrides = frappe.get_all(
		"Schedule Override",
		filters={"date": ["<", cutoff]},
		pluck="name"
	)

	deleted_count = 0

	for name in stale_overrides:
		try:
			frappe.delete_doc("Schedule Override", name, ignore_permissions=True)
			deleted_count += 1
		except Exception as e:
			frappe.logger("school_portal").error(
				f"Error al eliminar Schedule Override {name}: {str(e)}"
			)
			# Continuar con los demás overrides
			continue

	if deleted_count > 0:
		frappe.logger("school_portal").info(
			f"cleanup_stale_overrides: {deleted_count} Schedule Overrides "
			f"anteriores a {cutoff} eliminados"
		)

	frappe.db.commit()

	return deleted_count
