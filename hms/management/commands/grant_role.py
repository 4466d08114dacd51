from django.core.management.base import BaseCommand, CommandError

from hms.models import User

ROLES = [c for c, _ in User.ROLE_CHOICES]


class Command(BaseCommand):
    help = "Create or update a user by email and give them a role, e.g. to bootstrap the first admin."

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('role', choices=ROLES)

    def handle(self, *args, **opts):
        email = opts['email'].strip().lower()
        if '@' not in email:
            raise CommandError(f'not an email address: {email}')
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            # linked to the identity provider by email on first login
            user = User(username=email, email=email, role=opts['role'])
            user.set_unusable_password()
            user.save()
            self.stdout.write(self.style.SUCCESS(f"created {email} ({user.role})"))
            return
        user.role = opts['role']
        user.save(update_fields=['role', 'updated_at'])
        self.stdout.write(self.style.SUCCESS(f"ok: {email} ({user.role})"))
