from django.urls import path

from .analytics_view import AdminStatsView, UserStatsView
from .blog_views import BlogDetailView, BlogListView, BlogStatusView
from .payment_views import CheckoutSessionView, FundingListView, SaveSessionView
from .views import (
    root, TokenView, DistrictListView, UpazilaListView,
    UserCreateView, UserRoleView, UserProfileView, AllUsersView, UserStatusView,
    DonationRequestCreateView, MyDonationRequestsView, PendingDonationRequestsView,
    DonationRequestDetailView, DonationRequestStatusView, DonateView,
    AllDonationRequestsView, StaffDonationRequestsView,
)

urlpatterns = [
    path('', root, name='root'),
    path('jwt', TokenView.as_view(), name='jwt'),

    # Locations
    path('districts', DistrictListView.as_view(), name='districts'),
    path('upazilas', UpazilaListView.as_view(), name='upazilas'),

    # Users
    path('users', UserCreateView.as_view(), name='user-create'),
    path('users/role/<str:key>', UserRoleView.as_view(), name='user-role'),
    path('user/<str:email>', UserProfileView.as_view(), name='user-profile'),
    path('all-users', AllUsersView.as_view(), name='all-users'),
    path('users/status/<str:user_id>', UserStatusView.as_view(), name='user-status-update'),

    # Donation requests
    path('donation-request', DonationRequestCreateView.as_view(), name='donation-request-create'),
    path('donation-requests', PendingDonationRequestsView.as_view(), name='donation-requests-pending'),
    path('donation-requests/<str:email>', MyDonationRequestsView.as_view(), name='donation-requests-mine'),
    path('donation-request/<str:request_id>', DonationRequestDetailView.as_view(), name='donation-request-detail'),
    path('donation-request/<str:request_id>/status', DonationRequestStatusView.as_view(), name='donation-request-status'),
    path('donation-request/<str:request_id>/donate', DonateView.as_view(), name='donation-request-donate'),
    path('all-donation-requests', AllDonationRequestsView.as_view(), name='all-donation-requests'),
    path('all-blood-donation-requests', StaffDonationRequestsView.as_view(), name='staff-donation-requests'),

    # Blogs
    path('blogs', BlogListView.as_view(), name='blogs'),
    path('blogs/<str:blog_id>', BlogDetailView.as_view(), name='blog-detail'),
    path('blogs/<str:blog_id>/status', BlogStatusView.as_view(), name='blog-status'),

    # Funding
    path('create-checkout-session', CheckoutSessionView.as_view(), name='create-checkout-session'),
    path('payments/save-session', SaveSessionView.as_view(), name='save-session'),
    path('funding', FundingListView.as_view(), name='funding'),

    # Dashboards
    path('admin-stats', AdminStatsView.as_view(), name='admin-stats'),
    path('user-stats/<str:email>', UserStatsView.as_view(), name='user-stats'),
]
