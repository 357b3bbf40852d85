from churchflow.models.user import User
from churchflow.models.church import Church, SubscriptionTier, SubscriptionStatus, DEFAULT_MODULES
from churchflow.models.church_user import ChurchUser, ChurchRole
from churchflow.models.member import Member, MembershipStatus
from churchflow.models.group import Group, GroupCategory
from churchflow.models.group_member import GroupMember
from churchflow.models.event import Event, EventCategory
from churchflow.models.event_registration import EventRegistration
from churchflow.models.attendance import Attendance
from churchflow.models.check_in import CheckIn, CheckInMethod
from churchflow.models.donation_fund import DonationFund
from churchflow.models.donation import Donation, PaymentMethod, PaymentStatus
from churchflow.models.web_page import WebPage
from churchflow.models.prayer_request import PrayerRequest, PrayerRequestStatus
from churchflow.models.push_subscription import PushSubscription
from churchflow.models.notification import Notification
from churchflow.models.activity_log import ActivityLog
from churchflow.models.volunteer_role import VolunteerRole
from churchflow.models.volunteer import Volunteer
from churchflow.models.communication import (
    Communication,
    CommunicationChannel,
    CommunicationStatus,
    RecipientType,
)
