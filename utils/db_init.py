"""Database initialization utilities for the microblog"""
from faker import Faker

from models.user import User

SAMPLE_PASSWORD = 'password'


def create_admin_user(db, identity_service, config):
    """Create admin user if not exists"""
    admin_email = config['ADMIN_EMAIL']
    admin = identity_service.find_by_email(admin_email)

    if not admin:
        print("Creating admin user from db_init...")
        admin = identity_service.create({
            'name': config['ADMIN_NAME'],
            'email': admin_email,
            'password': config['ADMIN_PASSWORD'],
            'password_confirmation': config['ADMIN_PASSWORD']
        })
        # admin is not assignable through the signup schema
        admin.admin = True
        db.session.commit()
        print(f"Admin user created: {admin.email}")
    else:
        print(f"Admin user already exists: {admin.email}")

    return admin


def create_sample_users(identity_service, count=99, seed=None):
    """Create fake users with a shared sample password"""
    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)

    users = []
    for n in range(1, count + 1):
        users.append(identity_service.create({
            'name': fake.name()[:50],
            'email': f"example-{n}@microblog.local",
            'password': SAMPLE_PASSWORD,
            'password_confirmation': SAMPLE_PASSWORD
        }))
    print(f"Created {len(users)} sample users")
    return users


def create_sample_microposts(post_service, users, per_user=50, seed=None):
    """Give each of the first six users some microposts"""
    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)

    created_count = 0
    for _ in range(per_user):
        for user in users[:6]:
            post_service.create(user.id, {'content': fake.sentence(nb_words=5)[:140]})
            created_count += 1
    print(f"Created {created_count} sample microposts")
    return created_count


def create_sample_relationships(following_service, users):
    """First user follows users 3..51, users 4..41 follow the first user"""
    if not users:
        return 0

    user = users[0]
    followed_users = users[2:51]
    followers = users[3:41]

    for followed in followed_users:
        following_service.follow(user.id, followed.id)
    for follower in followers:
        following_service.follow(follower.id, user.id)

    created_count = len(followed_users) + len(followers)
    print(f"Created {created_count} sample relationships")
    return created_count


def populate_sample_data(services, user_count=99, seed=None):
    """Sample users, microposts and follows, skipped if sample users exist"""
    if User.query.filter(User.email.like('example-%')).first():
        print("Sample data already present")
        return False

    users = create_sample_users(services.identity, count=user_count, seed=seed)
    create_sample_microposts(services.posts, users, seed=seed)
    create_sample_relationships(services.following, users)
    return True
