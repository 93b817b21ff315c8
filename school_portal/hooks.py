app_name = "school_portal"
app_title = "School Portal"
app_publisher = "School Portal contributors"
app_description = "Portal escolar: horario diario con ediciones del usuario"
app_email = "dev@school-portal.example"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Scheduled Tasks
# ---------------

scheduler_events = {
	"daily": [
		"school_portal.school_portal.scheduling.tasks.cleanup_stale_overrides"
	]
}

# Testing
# -------

# before_tests = "school_portal.install.before_tests"
