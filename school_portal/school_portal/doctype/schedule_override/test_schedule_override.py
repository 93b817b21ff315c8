# Copyright (c) 2026, School Portal contributors
# See license.txt

"""
Tests for Schedule Override DocType

Tests the validate() checks: required fields, time order and overlap warnings.
The controller is built without a site and frappe is replaced with mocks.
"""

import unittest
from unittest.mock import patch
from datetime import date, time

import frappe

from school_portal.school_portal.doctype.schedule_override.schedule_override import ScheduleOverride


MODULE = "school_portal.school_portal.doctype.schedule_override.schedule_override"


def make_override(**fields):
	doc = object.__new__(ScheduleOverride)
	doc.__dict__.update({
		"name": "SO-0002",
		"user": "student@example.com",
		"bell_schedule": "Upper School",
		"date": date(2026, 1, 20),
		"label": "Exam",
		"start_time": time(9, 0),
		"end_time": time(10, 0)
	})
	doc.__dict__.update(fields)
	return doc


class TestScheduleOverride(unittest.TestCase):
	"""Tests for Schedule Override validation."""

	def setUp(self):
		frappe_patcher = patch(f"{MODULE}.frappe")
		self.mock_frappe = frappe_patcher.start()
		self.addCleanup(frappe_patcher.stop)
		self.mock_frappe.throw.side_effect = frappe.ValidationError
		self.mock_frappe.get_all.return_value = []

		translate_patcher = patch(f"{MODULE}._", side_effect=lambda message: message)
		translate_patcher.start()
		self.addCleanup(translate_patcher.stop)

	def thrown_message(self):
		return self.mock_frappe.throw.call_args[0][0]

	def test_valid_override(self):
		"""Test that a complete override with no neighbours passes silently."""
		make_override().validate()

		self.mock_frappe.throw.assert_not_called()
		self.mock_frappe.msgprint.assert_not_called()

	def test_missing_label(self):
		"""Test that an override without label is rejected."""
		with self.assertRaises(frappe.ValidationError):
			make_override(label=None).validate()

		self.assertEqual(self.thrown_message(), "Label es requerido")

	def test_start_equal_end(self):
		"""Test that a zero-length override is rejected."""
		with self.assertRaises(frappe.ValidationError):
			make_override(start_time=time(9, 0), end_time=time(9, 0)).validate()

		self.assertIn("09:00", self.thrown_message())
		self.mock_frappe.get_all.assert_not_called()

	def test_start_after_end(self):
		"""Test that an inverted override is rejected."""
		with self.assertRaises(frappe.ValidationError):
			make_override(start_time="11:00:00", end_time="10:00:00").validate()

		self.assertIn("Start Time (11:00)", self.thrown_message())

	def test_overlap_with_other_override_warns(self):
		"""Test that overlapping another override warns but does not block."""
		self.mock_frappe.get_all.return_value = [
			frappe._dict(name="SO-0001", label="Assembly", start_time="09:30:00", end_time="10:30:00")
		]

		make_override().validate()

		self.mock_frappe.throw.assert_not_called()
		self.mock_frappe.msgprint.assert_called_once()
		message = self.mock_frappe.msgprint.call_args[0][0]
		self.assertIn("SO-0001", message)
		self.assertIn("Assembly", message)
		self.assertEqual(self.mock_frappe.msgprint.call_args[1], {"indicator": "orange", "alert": True})

	def test_adjacent_override_does_not_warn(self):
		"""Test that an override touching this one end-to-start is not an overlap."""
		self.mock_frappe.get_all.return_value = [
			frappe._dict(name="SO-0001", label="Assembly", start_time="10:00:00", end_time="10:30:00"),
			frappe._dict(name="SO-0003", label="Break", start_time="08:30:00", end_time="09:00:00")
		]

		make_override().validate()

		self.mock_frappe.msgprint.assert_not_called()

	def test_query_excludes_itself(self):
		"""Test that the overlap query filters by user, schedule and date, skipping this doc."""
		make_override().validate()

		filters = self.mock_frappe.get_all.call_args[1]["filters"]
		self.assertEqual(filters, {
			"user": "student@example.com",
			"bell_schedule": "Upper School",
			"date": date(2026, 1, 20),
			"name": ["!=", "SO-0002"]
		})

	def test_new_override_queries_all(self):
		"""Test that an unsaved override compares against every stored one."""
		make_override(name=None).validate()

		filters = self.mock_frappe.get_all.call_args[1]["filters"]
		self.assertEqual(filters["name"], ["is", "set"])


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
