"""Seed database with demo data."""
from gearguard.database import Base, SessionLocal, engine
from gearguard.models import Equipment, MaintenanceRequest, MaintenanceTeam, Technician, WorkCenter
from gearguard.services.request_store import RequestStore
from datetime import date, timedelta
import uuid


def seed():
    """Seed database with demo data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        if db.query(Equipment).first():
            print("Database already has equipment, skipping seed.")
            return

        today = date.today()

        # Teams are matched to equipment by department name.
        teams_data = {
            'Machine Shop': ['Ravi Kumar', 'Sunil Rao'],
            'Automation': ['Anil Mehra'],
            'Heavy Equipment': ['Deepak Verma', 'Kiran Joshi'],
        }
        teams = {}
        technicians = {}
        for team_name, members in teams_data.items():
            team = MaintenanceTeam(id=uuid.uuid4(), name=team_name)
            db.add(team)
            teams[team_name] = team
            for member in members:
                technician = Technician(id=uuid.uuid4(), team_id=team.id, name=member)
                db.add(technician)
                technicians[member] = technician
        db.flush()

        equipment_data = [
            {
                'name': 'CNC Milling Machine A1',
                'serial_number': 'CNC-2024-001',
                'category': 'Machine Tools',
                'department': 'Machine Shop',
                'location': 'Hall 1',
                'owner': 'Amit Sharma',
                'purchase_date': date(2024, 1, 15),
            },
            {
                'name': 'Industrial Robot Arm R2',
                'serial_number': 'ROB-2024-002',
                'category': 'Robotics',
                'department': 'Automation',
                'location': 'Assembly line 2',
                'owner': 'Priya Singh',
                'purchase_date': date(2024, 2, 20),
            },
            {
                'name': 'Hydraulic Press HP-500',
                'serial_number': 'HYD-2024-003',
                'category': 'Press Equipment',
                'department': 'Heavy Equipment',
                'location': 'Hall 3',
                'owner': 'Vikram Patel',
                'purchase_date': date(2024, 3, 10),
            },
        ]
        equipment = []
        for item in equipment_data:
            machine = Equipment(id=uuid.uuid4(), **item)
            db.add(machine)
            equipment.append(machine)
        db.flush()

        work_center = WorkCenter(
            id=uuid.uuid4(),
            name='Assembly Line 1',
            code='WC-001',
            tag='assembly',
            cost_per_hour=120.0,
            capacity_efficiency=95.0,
            oee_target=85.0,
        )
        db.add(work_center)
        db.flush()

        requests_data = [
            {
                'equipment_id': equipment[0].id,
                'team_id': teams['Machine Shop'].id,
                'technician_id': technicians['Ravi Kumar'].id,
                'type': 'corrective',
                'subject': 'Spindle vibration above tolerance',
                'stage': 'in_progress',
                'priority': 'high',
                'scheduled_date': today - timedelta(days=2),
                'duration': 3.5,
            },
            {
                'equipment_id': equipment[0].id,
                'team_id': teams['Machine Shop'].id,
                'technician_id': technicians['Sunil Rao'].id,
                'type': 'preventive',
                'subject': 'Quarterly lubrication',
                'stage': 'new',
                'priority': 'medium',
                'scheduled_date': today + timedelta(days=7),
                'duration': 1.0,
            },
            {
                'equipment_id': equipment[2].id,
                'team_id': teams['Heavy Equipment'].id,
                'technician_id': technicians['Deepak Verma'].id,
                'type': 'corrective',
                'subject': 'Hydraulic seal leak',
                'stage': 'repaired',
                'priority': 'urgent',
                'scheduled_date': today - timedelta(days=10),
                'duration': 6.0,
            },
            {
                'work_center_id': work_center.id,
                'type': 'preventive',
                'subject': 'Conveyor belt inspection',
                'stage': 'new',
                'priority': 'low',
                'scheduled_date': today + timedelta(days=3),
                'duration': 2.0,
                'instructions': 'Check belt tension and roller wear.',
            },
        ]
        store = RequestStore(db)
        for request_data in requests_data:
            db.add(MaintenanceRequest(id=uuid.uuid4(), position=store.next_position(), **request_data))

        db.commit()
        print("✅ Database seeded successfully!")
        print(f"  {len(equipment)} equipment, {len(teams)} teams, {len(requests_data)} requests")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
