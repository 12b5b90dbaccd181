app_name = "agenda_carrinho"
app_title = "Agenda Carrinho"
app_publisher = "Agenda Carrinho contributors"
app_description = "Agenda de Carrinho e Display: agendas recorrentes e reserva de horários"
app_email = "admin@agenda-carrinho.example"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Document Events
# ---------------
# Hook on document methods and events

# doc_events = {
# 	"*": {
# 		"on_update": "method",
# 	}
# }

# Scheduled Tasks
# ---------------

scheduler_events = {
	"daily": [
		"agenda_carrinho.agenda_carrinho.scheduling.tasks.send_booking_reminders"
	]
}

# Testing
# -------

# before_tests = "agenda_carrinho.install.before_tests"

# Request Events
# ----------------
# before_request = ["agenda_carrinho.utils.before_request"]
# after_request = ["agenda_carrinho.utils.after_request"]
