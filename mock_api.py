"""Mock clinic-management API for local development.

Flask server imitating the three upstream endpoints the booking service uses:
- Lookup (clinics + doctors of a branch)
- Free appointment slots of a doctor on a date
- Add appointment

Requests must carry the `apikey` header when CLINIC_API_KEY is set.

Run with: python mock_api.py
"""

from datetime import datetime, timedelta
from flask import Flask, request, jsonify
from flask_cors import CORS

from clinic_booking import config

app = Flask(__name__)
CORS(app)

CLINICS = [
    {"Id": 1, "Name": "General Medicine", "ShowInApp": True},
    {"Id": 2, "Name": "Pediatrics", "ShowInApp": True},
    {"Id": 3, "Name": "Dermatology", "ShowInApp": True},
]

DOCTORS = [
    {"DoctorID": 101, "Name": "Sara Haddad", "DoctorSpecialityID": 10, "ClinicID": 1,
     "ImgPath": "0", "LicenseNo": "DHA-10231"},
    {"DoctorID": 102, "Name": "Omar Khalil", "DoctorSpecialityID": 11, "ClinicID": 2,
     "ImgPath": "", "LicenseNo": "DHA-22310"},
    {"DoctorID": 103, "Name": "Lina Farouk", "DoctorSpecialityID": 12, "ClinicID": 3,
     "ImgPath": "/images/doctors/103.jpg", "LicenseNo": "DHA-30112"},
]

OPERATING_HOURS = {
    "start_time": "09:00",
    "end_time": "17:00",
    "slot_duration_minutes": 30,
    "lunch_break": {"start": "13:00", "end": "14:00"},
}

# In-memory storage
appointments = []
appointment_counter = 1000

REQUIRED_APPOINTMENT_FIELDS = [
    "DoctorID", "AppDate", "Patient", "PatientID", "MobileNo", "UpdatedBy",
    "RoomID", "AppointmentReasonsID", "StDate", "EndDate", "Description",
    "NonArabic", "HowToKnow", "StatusID", "BranchID", "Fname", "MName", "LName",
]


def api_key_rejected() -> bool:
    """True when a key is configured and the request does not carry it."""
    if not config.CLINIC_API_KEY:
        return False
    return request.headers.get(config.CLINIC_API_KEY_HEADER) != config.CLINIC_API_KEY


@app.before_request
def check_api_key():
    if request.path == "/health" or request.method == "OPTIONS":
        return None
    if api_key_rejected():
        return jsonify({"Success": False, "Message": "Invalid API key"}), 401
    return None


def generate_time_slots(doctor_id: int, request_date: datetime):
    """Free 30-minute slots of a doctor on a day, skipping lunch and bookings.

    Args:
        doctor_id: Doctor to generate slots for
        request_date: Day (time part ignored)

    Returns:
        List of {"StartTime", "EndTime"} with ISO timestamps
    """
    day = request_date.replace(hour=0, minute=0, second=0, microsecond=0)
    booked = {
        apt["StDate"]
        for apt in appointments
        if apt["DoctorID"] == str(doctor_id)
    }

    start = datetime.strptime(OPERATING_HOURS["start_time"], "%H:%M")
    end = datetime.strptime(OPERATING_HOURS["end_time"], "%H:%M")
    lunch_start = datetime.strptime(OPERATING_HOURS["lunch_break"]["start"], "%H:%M")
    lunch_end = datetime.strptime(OPERATING_HOURS["lunch_break"]["end"], "%H:%M")
    step = timedelta(minutes=OPERATING_HOURS["slot_duration_minutes"])

    slots = []
    current = start
    while current + step <= end:
        if lunch_start <= current < lunch_end:
            current += step
            continue

        slot_start = day.replace(hour=current.hour, minute=current.minute)
        slot_end = slot_start + step
        if slot_start.strftime("%Y-%m-%d %H:%M") not in booked:
            slots.append({
                "StartTime": slot_start.isoformat(),
                "EndTime": slot_end.isoformat(),
            })
        current += step

    return slots


@app.route('/api/ApiLookUpController/GetLookupCalenderForWeb', methods=['GET'])
def get_lookup():
    """GET lookup?branchId=22 - Clinics and doctors of a branch."""
    if request.args.get('branchId') != config.BRANCH_ID:
        return jsonify({"Doctors": [], "Clinics": []})

    return jsonify({"Doctors": DOCTORS, "Clinics": CLINICS})


@app.route('/api/ApiAppointmentController/GetFreeAppForDr', methods=['GET'])
def get_free_slots():
    """GET free slots?RequestDate=2025-06-01&DoctorID=101&BranchID=22"""
    request_date = request.args.get('RequestDate')
    doctor_id = request.args.get('DoctorID')

    if not request_date or not doctor_id:
        return jsonify({
            "Success": False,
            "Message": "RequestDate and DoctorID are required"
        }), 400

    try:
        parsed_date = datetime.strptime(request_date, "%Y-%m-%d")
    except ValueError:
        return jsonify({
            "Success": False,
            "Message": "Invalid date format. Use YYYY-MM-DD"
        }), 400

    if not any(str(d["DoctorID"]) == doctor_id for d in DOCTORS):
        return jsonify([])

    return jsonify(generate_time_slots(int(doctor_id), parsed_date))


@app.route('/api/ApiAppointmentController/AddAppointmentForWeb', methods=['POST'])
def add_appointment():
    """POST add appointment - body is the fixed-shape booking record."""
    global appointment_counter

    data = request.get_json(silent=True)
    if not data:
        return jsonify({
            "Success": False,
            "Message": "Request body is required"
        }), 400

    for field in REQUIRED_APPOINTMENT_FIELDS:
        if field not in data:
            return jsonify({
                "Success": False,
                "Message": f"Missing required field: {field}"
            }), 400

    try:
        start = datetime.strptime(data["StDate"], "%Y-%m-%d %H:%M")
    except ValueError:
        return jsonify({
            "Success": False,
            "Message": "Invalid StDate. Use yyyy-MM-dd HH:mm"
        }), 400

    free_starts = {
        slot["StartTime"]
        for slot in generate_time_slots(int(data["DoctorID"]), start)
    }
    if start.isoformat() not in free_starts:
        return jsonify({
            "Success": False,
            "Message": "This time slot is no longer available"
        }), 409

    appointment_counter += 1
    appointment = {**data, "AppointmentID": appointment_counter}
    appointments.append(appointment)

    return jsonify({
        "Success": True,
        "AppointmentID": appointment_counter,
        "Message": "Appointment added"
    })


@app.route('/health', methods=['GET'])
def health_check():
    """GET /health - Health check endpoint."""
    return jsonify({
        "Success": True,
        "status": "healthy",
        "total_appointments": len(appointments),
        "timestamp": datetime.now().isoformat()
    })


def print_startup_info():
    """Print server startup information."""
    print("=" * 70)
    print("MOCK CLINIC API SERVER")
    print("=" * 70)
    print(f"\nServer: http://localhost:{config.MOCK_API_PORT}")
    print(f"Branch: {config.BRANCH_ID}")
    print(f"Clinics: {len(CLINICS)}  Doctors: {len(DOCTORS)}")
    print(f"API key required: {'yes' if config.CLINIC_API_KEY else 'no'}")
    print("\nEndpoints:")
    print("   GET  /api/ApiLookUpController/GetLookupCalenderForWeb?branchId=...")
    print("   GET  /api/ApiAppointmentController/GetFreeAppForDr?RequestDate=...&DoctorID=...")
    print("   POST /api/ApiAppointmentController/AddAppointmentForWeb")
    print("   GET  /health")
    print("=" * 70)


if __name__ == '__main__':
    print_startup_info()
    app.run(
        debug=True,
        port=config.MOCK_API_PORT,
        host='0.0.0.0'
    )
