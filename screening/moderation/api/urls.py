from django.urls import path

from screening.moderation.api import views

urlpatterns = [
    path("text/", views.ModerateTextView.as_view(), name="moderation-text"),
    path("image/", views.ModerateImageView.as_view(), name="moderation-image"),
    path("request/", views.RequestModerationView.as_view(), name="moderation-request"),
    path("pending/", views.PendingView.as_view(), name="moderation-pending"),
    path("approve/", views.ApproveView.as_view(), name="moderation-approve"),
    path("reject/", views.RejectView.as_view(), name="moderation-reject"),
    path("statistics/", views.StatisticsView.as_view(), name="moderation-statistics"),
    path("config/", views.ConfigView.as_view(), name="moderation-config"),
    path("test-provider/", views.ProviderTestView.as_view(), name="moderation-test-provider"),
    path("clear-cache/", views.ClearCacheView.as_view(), name="moderation-clear-cache"),
    path("logs/", views.ModerationLogListView.as_view(), name="moderation-logs"),
]
