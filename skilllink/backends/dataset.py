"""Bundled demo dataset: workers, clients, jobs, applications, categories."""
from __future__ import annotations

from typing import Optional

from skilllink.core.models import Application, Category, ClientUser, Job, User, WorkerUser

_AVATAR = "https://images.unsplash.com/photo-{}?w=150&h=150&fit=crop&crop=face"

DEFAULT_AVATAR = _AVATAR.format("1472099645785-5658abf4ff4e")

DEMO_PASSWORD = "demo123"

WORKERS: list[WorkerUser] = [
    WorkerUser(
        id="w1", name="Marcus Johnson", email="marcus.johnson@email.com",
        avatar=_AVATAR.format("1507003211169-0a1dd7228f2d"), phone="+1 (555) 123-4567",
        location="New York, NY", created_at="2024-01-15",
        skills=["Framing", "Drywall", "Finishing", "Cabinet Installation"], category="Carpenter",
        experience=12, hourly_rate=45, rating=4.8, total_jobs=127, availability="available",
        bio="Experienced carpenter specializing in residential and commercial projects.",
        certifications=["OSHA 10", "Lead-Safe Certified"],
    ),
    WorkerUser(
        id="w2", name="Sarah Martinez", email="sarah.martinez@email.com",
        avatar=_AVATAR.format("1494790108755-2616b5d90d27"), phone="+1 (555) 234-5678",
        location="Los Angeles, CA", created_at="2024-02-01",
        skills=["Wiring", "Panel Installation", "Troubleshooting", "Smart Home Setup"], category="Electrician",
        experience=8, hourly_rate=55, rating=4.9, total_jobs=89, availability="available",
        bio="Licensed electrician with expertise in residential and commercial electrical systems.",
        certifications=["Master Electrician License", "Solar Installation Certified"],
    ),
    WorkerUser(
        id="w3", name="David Thompson", email="david.thompson@email.com",
        phone="+1 (555) 345-6789", location="Chicago, IL", created_at="2024-01-20",
        skills=["Pipe Installation", "Drain Cleaning", "Water Heater Repair", "Emergency Service"],
        category="Plumber", experience=15, hourly_rate=50, rating=4.7, total_jobs=156, availability="busy",
        bio="Reliable plumber offering 24/7 emergency services and quality repairs.",
        certifications=["Journeyman Plumber", "Backflow Prevention Certified"],
    ),
    WorkerUser(
        id="w4", name="Lisa Chen", email="lisa.chen@email.com",
        phone="+1 (555) 456-7890", location="Miami, FL", created_at="2024-03-01",
        skills=["Bricklaying", "Stone Work", "Concrete", "Restoration"], category="Mason",
        experience=10, hourly_rate=40, rating=4.6, total_jobs=78, availability="available",
        bio="Skilled mason specializing in both traditional and modern masonry techniques.",
        certifications=["NCCER Certified", "Historic Preservation Specialist"],
    ),
    WorkerUser(
        id="w5", name="James Wilson", email="james.wilson@email.com",
        phone="+1 (555) 567-8901", location="Seattle, WA", created_at="2024-02-15",
        skills=["Interior Painting", "Exterior Painting", "Wallpaper", "Color Consultation"], category="Painter",
        experience=6, hourly_rate=35, rating=4.5, total_jobs=45, availability="available",
        bio="Professional painter with an eye for detail and color matching expertise.",
        certifications=["EPA RRP Certified", "Sherwin Williams Certified"],
    ),
]

CLIENTS: list[ClientUser] = [
    ClientUser(id="c1", name="Emily Rodriguez", email="emily.rodriguez@email.com", phone="+1 (555) 111-2222",
               location="Austin, TX", created_at="2024-01-10", company="Rodriguez Properties",
               jobs_posted=12, total_spent=15000),
    ClientUser(id="c2", name="Michael Brown", email="michael.brown@email.com", phone="+1 (555) 222-3333",
               location="Denver, CO", created_at="2024-02-01", jobs_posted=8, total_spent=8500),
    ClientUser(id="c3", name="Jennifer Davis", email="jennifer.davis@email.com", phone="+1 (555) 333-4444",
               location="Boston, MA", created_at="2024-01-25", company="Davis Construction Group",
               jobs_posted=25, total_spent=45000),
    ClientUser(id="c4", name="Robert Kim", email="robert.kim@email.com", phone="+1 (555) 444-5555",
               location="San Francisco, CA", created_at="2024-03-01", jobs_posted=5, total_spent=3200),
    ClientUser(id="c5", name="Amanda Foster", email="amanda.foster@email.com", phone="+1 (555) 555-6666",
               location="Phoenix, AZ", created_at="2024-02-10", jobs_posted=3, total_spent=2100),
]

# Accounts that can log in against the demo backend (role must match too).
DEMO_ACCOUNTS: dict[str, str] = {
    "emily.rodriguez@email.com": DEMO_PASSWORD,
    "marcus.johnson@email.com": DEMO_PASSWORD,
}

JOBS: list[Job] = [
    Job(id="j1", title="Kitchen Cabinet Installation",
        description="Install custom kitchen cabinets in a 200 sq ft kitchen. All materials provided.",
        category="Carpenter", location="Austin, TX", budget=2500, duration="1 week", client_id="c1",
        status="open", skills=["Experience with cabinet installation", "Own tools", "Available weekdays"],
        created_at="2024-07-01", updated_at="2024-07-01"),
    Job(id="j2", title="Electrical Panel Upgrade",
        description="Upgrade old electrical panel to 200 amp service. Must be licensed electrician.",
        category="Electrician", location="Denver, CO", budget=1800, duration="1-2 days", client_id="c2",
        status="in_progress", skills=["Licensed electrician", "Insurance required", "Permit experience"],
        created_at="2024-06-28", updated_at="2024-06-28"),
    Job(id="j3", title="Bathroom Plumbing Repair",
        description="Fix leaking pipes under bathroom sink and install new faucet.",
        category="Plumber", location="Boston, MA", budget=450, duration="1-2 days", client_id="c3",
        status="completed", skills=["Emergency service available", "Licensed plumber"],
        created_at="2024-06-25", updated_at="2024-06-25", deadline="2024-06-26"),
    Job(id="j4", title="Brick Patio Construction",
        description="Build 12x16 brick patio in backyard. Materials to be provided by contractor.",
        category="Mason", location="San Francisco, CA", budget=3200, duration="2-4 weeks", client_id="c4",
        status="open", skills=["Masonry experience", "Own equipment", "Material sourcing"],
        created_at="2024-07-02", updated_at="2024-07-02"),
    Job(id="j5", title="Interior House Painting",
        description="Paint 3 bedrooms and living room. Approximately 1200 sq ft. Paint provided.",
        category="Painter", location="Phoenix, AZ", budget=1200, duration="1 week", client_id="c5",
        status="open", skills=["Interior painting experience", "Clean work area", "Own brushes and equipment"],
        created_at="2024-07-03", updated_at="2024-07-03"),
]

APPLICATIONS: list[Application] = [
    Application(id="a1", job_id="j1", worker_id="w1", proposed_rate=45, created_at="2024-07-01",
                updated_at="2024-07-01",
                message="12 years of carpentry experience, many kitchen installs. I can start immediately."),
    Application(id="a2", job_id="j4", worker_id="w4", proposed_rate=40, created_at="2024-07-02",
                updated_at="2024-07-02",
                message="I specialize in brick and stone work and can source quality materials."),
    Application(id="a3", job_id="j5", worker_id="w5", proposed_rate=35, created_at="2024-07-03",
                updated_at="2024-07-03",
                message="Professional painter with residential experience. Clean, quality work."),
]

CATEGORIES: list[Category] = [
    Category(id="carpenter", name="Carpenter", description="Framing, cabinets, trim work"),
    Category(id="electrician", name="Electrician", description="Wiring, panels, lighting"),
    Category(id="plumber", name="Plumber", description="Pipes, fixtures, repairs"),
    Category(id="mason", name="Mason", description="Brick, stone, concrete work"),
    Category(id="painter", name="Painter", description="Interior and exterior painting"),
    Category(id="roofer", name="Roofer", description="Roof repair and installation"),
    Category(id="hvac", name="HVAC Tech", description="Heating and cooling systems"),
    Category(id="landscaper", name="Landscaper", description="Lawn care and garden design"),
]

SKILLS_BY_CATEGORY: dict[str, list[str]] = {
    "carpenter": ["Framing", "Drywall", "Finishing", "Cabinet Installation", "Trim Work"],
    "electrician": ["Wiring", "Panel Installation", "Troubleshooting", "Smart Home Setup", "Lighting"],
    "plumber": ["Pipe Installation", "Drain Cleaning", "Water Heater Repair", "Emergency Service"],
    "mason": ["Bricklaying", "Stone Work", "Concrete", "Restoration"],
    "painter": ["Interior Painting", "Exterior Painting", "Wallpaper", "Color Consultation"],
}

UPLOAD_URLS: dict[str, str] = {
    "profile": DEFAULT_AVATAR,
    "job": "https://images.unsplash.com/photo-1504307651254-35680f356dfd?w=400",
    "document": "https://example.com/documents/demo-file.pdf",
}


def all_users() -> list[User]:
    return [*WORKERS, *CLIENTS]


def find_user(user_id: str) -> Optional[User]:
    for user in all_users():
        if user.id == user_id:
            return user
    return None


def find_user_by_email(email: str) -> Optional[User]:
    wanted = (email or "").strip().lower()
    for user in all_users():
        if user.email.lower() == wanted:
            return user
    return None
