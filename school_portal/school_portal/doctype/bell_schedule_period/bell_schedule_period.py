# Copyright (c) 2026, School Portal contributors
# For license information, please see license.txt

from frappe.model.document import Document


class BellSchedulePeriod(Document):
	pass
