"""
Static game data: offices, perks, infrastructure, boosts, the recruit
pool, the starting roster and the tender templates.

Entries here are prototypes. Anything the simulation mutates is copied
into the company state first.
"""

from typing import Dict, List

from entities import (
    BoardMember,
    Competitor,
    Employee,
    InfrastructureItem,
    MarketingChannel,
    Office,
    Perk,
    RecruitCandidate,
)

OFFICES: Dict[str, Office] = {
    office.id: office
    for office in (
        Office("garage", "Garage", rent=0.0, max_employees=5, required_level=1),
        Office("coworking", "Coworking Desk", rent=2500.0, max_employees=10, required_level=1),
        Office("open_space", "Open Space", rent=8000.0, max_employees=25, required_level=2),
        Office("tower_floor", "Tower Floor", rent=20000.0, max_employees=60, required_level=3),
        Office("campus", "Campus", rent=50000.0, max_employees=150, required_level=5),
    )
}

PERKS: Dict[str, Perk] = {
    perk.id: perk
    for perk in (
        Perk("coffee", "Specialty Coffee", monthly_cost=500.0, fatigue_reduction=1.0, motivation_boost=1.0),
        Perk("gym", "Gym Membership", monthly_cost=2000.0, fatigue_reduction=3.0, motivation_boost=1.0),
        Perk("remote_friday", "Remote Fridays", monthly_cost=800.0, fatigue_reduction=2.0, motivation_boost=2.0),
        Perk("chef", "In-house Chef", monthly_cost=4000.0, fatigue_reduction=1.0, motivation_boost=3.0),
        Perk("nap_room", "Nap Room", monthly_cost=1500.0, fatigue_reduction=4.0, motivation_boost=0.0),
    )
}

INFRASTRUCTURE: Dict[str, InfrastructureItem] = {
    item.id: item
    for item in (
        InfrastructureItem("servers", "Server Rack", cost=30000.0, monthly_cost=1500.0, revenue_bonus=0.05),
        InfrastructureItem("network", "Fiber Network", cost=20000.0, monthly_cost=800.0, revenue_bonus=0.03),
        InfrastructureItem(
            "cloud_backup", "Cloud Backup", cost=15000.0, monthly_cost=600.0,
            dependencies=("servers", "network"), revenue_bonus=0.02,
        ),
        InfrastructureItem(
            "crm", "CRM Suite", cost=25000.0, monthly_cost=1000.0,
            dependencies=("servers",), revenue_bonus=0.06,
        ),
        InfrastructureItem(
            "security_suite", "Security Suite", cost=18000.0, monthly_cost=700.0,
            dependencies=("network",), revenue_bonus=0.01,
        ),
    )
}

# Purchasable temporary boosts: (type, value, days, cost)
BOOSTS: Dict[str, Dict[str, object]] = {
    "team_party": {"type": "motivation", "value": 10.0, "days": 7.0, "cost": 5000.0},
    "offsite": {"type": "motivation", "value": 20.0, "days": 10.0, "cost": 15000.0},
    "spa_day": {"type": "fatigue", "value": 20.0, "days": 5.0, "cost": 4000.0},
    "wellness_week": {"type": "fatigue", "value": 35.0, "days": 7.0, "cost": 9000.0},
}

RECRUIT_POOL: List[RecruitCandidate] = [
    RecruitCandidate(100, "Ibrahim Bah", "Mobile Developer", "tech", 3, 7000.0, 80.0),
    RecruitCandidate(101, "Marie Ndour", "Data Analyst", "tech", 4, 9000.0, 85.0),
    RecruitCandidate(102, "Oumar Cisse", "Community Manager", "creative", 2, 4500.0, 90.0),
    RecruitCandidate(103, "Adama Keita", "DevOps Engineer", "tech", 5, 11000.0, 75.0),
    RecruitCandidate(104, "Ndeye Fall", "HR Assistant", "hr", 3, 5000.0, 85.0),
    RecruitCandidate(105, "Seydou Diop", "Account Executive", "sales", 2, 4000.0, 70.0),
    RecruitCandidate(106, "Clarisse Ouedraogo", "Graphic Designer", "creative", 4, 7500.0, 80.0),
    RecruitCandidate(107, "Jean-Paul Mbike", "Backend Developer", "tech", 4, 8500.0, 78.0),
    RecruitCandidate(108, "Awa Sarr", "Sales Lead", "sales", 4, 8000.0, 82.0),
    RecruitCandidate(109, "Moussa Traore", "Operations Manager", "management", 3, 9500.0, 76.0),
]

STARTING_EMPLOYEES: List[Employee] = [
    Employee(1, "Fatou Diallo", "Lead Developer", "tech", 3, 6000.0, 80.0),
    Employee(2, "Koffi Mensah", "Sales Representative", "sales", 2, 4000.0, 75.0),
    Employee(3, "Aminata Sow", "Product Designer", "creative", 3, 5000.0, 85.0),
]

STARTING_CHANNELS: List[MarketingChannel] = [
    MarketingChannel("social", "Social Media", budget=2000.0, efficiency=0.05),
    MarketingChannel("search", "Search Ads", budget=2000.0, efficiency=0.04),
    MarketingChannel("print", "Print & Radio", budget=1000.0, efficiency=0.02),
]

STARTING_COMPETITORS: List[Competitor] = [
    Competitor("nexa", "Nexa Digital", market_share=18.0, growth_rate=0.02),
    Competitor("sahel_soft", "Sahel Soft", market_share=12.0, growth_rate=0.03),
    Competitor("atlas", "Atlas Systems", market_share=25.0, growth_rate=0.01),
]

STARTING_BOARD: List[BoardMember] = [
    BoardMember(1, "Aissatou Ba", influence=0.4, satisfaction=75.0, personality="conservative", share_percent=20.0),
    BoardMember(2, "Kwame Asante", influence=0.3, satisfaction=70.0, personality="aggressive", share_percent=10.0),
]

INVESTOR_NAMES: List[str] = [
    "Mariam Kone",
    "Yao Kouassi",
    "Binta Camara",
    "Samuel Okafor",
    "Khadija Benali",
    "Emmanuel Tchami",
]

# Tender templates; reward and cost scale with company level
TENDER_TEMPLATES: List[Dict[str, object]] = [
    {
        "title": "Municipal Website Redesign",
        "duration": 20.0, "cost": 5000.0, "budget": 6000.0, "team_size": 2,
        "required_specialties": {"tech": 1, "creative": 1},
        "reward": 30000.0, "shareholder_opinion": 3.0,
    },
    {
        "title": "Retail Chain CRM Rollout",
        "duration": 35.0, "cost": 12000.0, "budget": 15000.0, "team_size": 3,
        "required_specialties": {"tech": 2},
        "reward": 70000.0, "shareholder_opinion": 5.0,
    },
    {
        "title": "Telecom Marketing Campaign",
        "duration": 15.0, "cost": 4000.0, "budget": 5000.0, "team_size": 2,
        "required_specialties": {"sales": 1, "creative": 1},
        "reward": 22000.0, "shareholder_opinion": 2.0,
    },
    {
        "title": "Bank Mobile App",
        "duration": 45.0, "cost": 20000.0, "budget": 24000.0, "team_size": 4,
        "required_specialties": {"tech": 2, "management": 1},
        "reward": 120000.0, "shareholder_opinion": 8.0,
    },
    {
        "title": "Hospital Staff Onboarding",
        "duration": 25.0, "cost": 6000.0, "budget": 8000.0, "team_size": 2,
        "required_specialties": {"hr": 1},
        "reward": 35000.0, "shareholder_opinion": 3.0,
    },
    {
        "title": "Logistics Dashboard",
        "duration": 30.0, "cost": 9000.0, "budget": 10000.0, "team_size": 3,
        "required_specialties": {"tech": 1, "sales": 1},
        "reward": 50000.0, "shareholder_opinion": 4.0,
    },
]


def offices_unlocked_at(level: int) -> List[Office]:
    return [office for office in OFFICES.values() if office.required_level == level]
