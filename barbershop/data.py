# barbershop/data.py

BARBERS = [
    {
        "id": "1",
        "name": "Michelle",
        "specialty": "Fade Master",
        "description": "Precision skin fades and seamless tapers with ultra-smooth transitions.",
        "prices": {"haircut": "15€", "haircut_beard": "20€"},
    },
    {
        "id": "2",
        "name": "Jay",
        "specialty": "Beard Sculptor",
        "description": "Razor-sharp beard shaping with perfect cheek and neckline symmetry.",
        "prices": {"haircut": "15€", "haircut_beard": "20€"},
    },
    {
        "id": "3",
        "name": "Luisa",
        "specialty": "Classic Cuts",
        "description": "Timeless scissor work: pompadours, side parts and crew cuts with clean tapers.",
        "prices": {"haircut": "15€", "haircut_beard": "20€"},
    },
    {
        "id": "4",
        "name": "Mario",
        "specialty": "Design Expert",
        "description": "Creative hair designs and freestyle patterns with crisp lineups.",
        "prices": {"haircut": "15€", "haircut_beard": "20€"},
    },
]

# Demo accounts. Plaintext passwords are hashed when the repository is built.
USERS = [
    {"id": "user1", "name": "John Doe", "phone": "+351 912 345 678", "password": "demo123", "role": "client"},
    {"id": "user2", "name": "Sarah Smith", "phone": "+351 987 654 321", "password": "demo123", "role": "client"},
    {"id": "user3", "name": "David Johnson", "phone": "+351 923 456 789", "password": "demo123", "role": "client"},
    {"id": "user4", "name": "Emily Brown", "phone": "+351 931 222 333", "password": "demo123", "role": "client"},
    {"id": "user5", "name": "Lucas Silva", "phone": "+351 912 777 888", "password": "demo123", "role": "client"},
    {"id": "barber1", "name": "Michelle", "phone": "+351 910 000 001", "password": "demo123", "role": "barber", "barber_id": "1"},
    {"id": "barber2", "name": "Jay", "phone": "+351 910 000 002", "password": "demo123", "role": "barber", "barber_id": "2"},
    {"id": "barber3", "name": "Luisa", "phone": "+351 910 000 003", "password": "demo123", "role": "barber", "barber_id": "3"},
    {"id": "barber4", "name": "Mario", "phone": "+351 910 000 004", "password": "demo123", "role": "barber", "barber_id": "4"},
]

# Each entry is written to the barber schedule and mirrored to the customer history.
APPOINTMENTS = [
    {"id": "101", "barber_id": "1", "customer_id": "user1", "date": "2025-08-14", "time": "09:00", "status": "completed"},
    {"id": "102", "barber_id": "1", "customer_id": "user2", "date": "2025-08-14", "time": "10:00", "status": "completed"},
    {"id": "103", "barber_id": "1", "customer_id": "user3", "date": "2025-08-15", "time": "13:00", "status": "completed"},
    {"id": "201", "barber_id": "2", "customer_id": "user4", "date": "2025-08-24", "time": "11:00", "status": "completed"},
    {"id": "202", "barber_id": "2", "customer_id": "user5", "date": "2025-08-27", "time": "14:00", "status": "no_show"},
    {"id": "301", "barber_id": "3", "customer_id": "user1", "date": "2025-08-25", "time": "10:00", "status": "canceled"},
    {"id": "302", "barber_id": "3", "customer_id": "user3", "date": "2025-08-30", "time": "15:00", "status": "completed"},
    {"id": "401", "barber_id": "4", "customer_id": "user2", "date": "2025-09-06", "time": "13:00", "status": "completed"},
]

shop_settings = {
    "time_slots": ["09:00", "10:00", "11:00", "13:00", "14:00", "15:00", "16:00"],
    "seed_start": "09:00",
    "seed_interval_minutes": 60,
    "seed_slot_count": 8,
    "next_up_grace_minutes": 10,
}
