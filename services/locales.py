# services/locales.py
# Message catalogs. Templates use str.format placeholders; HTML parse mode.

EN = {
    # menus
    "welcome": "👋 Hi, {name}!\n\nI report weather and air quality, watch thresholds you care about and send scheduled updates.",
    "main_menu": "🏠 Main menu",
    "help": (
        "<b>Commands</b>\n"
        "/weather [place] - current weather\n"
        "/forecast [place] - 5 day forecast\n"
        "/air [place] - air quality\n"
        "/setlocation &lt;place or lat,lon&gt; - save your location\n"
        "/settimezone &lt;Area/City&gt; - set your timezone\n"
        "/subscribe - scheduled notifications\n"
        "/subscriptions - manage notifications\n"
        "/addalert - new weather alert\n"
        "/alerts - manage alerts\n"
        "/settings - preferences\n"
        "/export - download your data\n\n"
        "You can also send a place name, coordinates or share a location pin."
    ),
    "btn_weather": "🌤 Weather",
    "btn_forecast": "📅 Forecast",
    "btn_air": "🌬 Air quality",
    "btn_alerts": "🔔 Alerts",
    "btn_notifications": "📬 Notifications",
    "btn_settings": "⚙️ Settings",
    "btn_export": "📤 Export",
    "btn_back": "⬅️ Back",
    "btn_confirm": "✅ Confirm",
    "btn_ignore": "❌ Ignore",
    "btn_keep_current": "📍 Keep current",
    "btn_cancel": "❌ Cancel",
    "btn_info": "ℹ️ How it works",
    "confirmation_ignored": "👍 OK, nothing changed.",

    # weather views
    "label_temperature": "Temperature",
    "label_feels_like": "Feels like",
    "label_humidity": "Humidity",
    "label_pressure": "Pressure",
    "label_wind": "Wind",
    "label_visibility": "Visibility",
    "label_uv_index": "UV index",
    "forecast_title": "Forecast for {location}",
    "air_title": "Air quality in {location}",
    "aqi_good": "Good",
    "aqi_moderate": "Moderate",
    "aqi_sensitive": "Unhealthy for sensitive groups",
    "aqi_unhealthy": "Unhealthy",
    "aqi_very_unhealthy": "Very unhealthy",
    "aqi_hazardous": "Hazardous",
    "btn_set_as_location": "📍 Set as my location",

    # location
    "btn_location": "📍 Location",
    "btn_set_location": "📍 Set location",
    "btn_clear_location": "🗑 Clear location",
    "location_prompt": "📍 Send me a city name, coordinates (e.g. <code>50.45, 30.52</code>) or share your location.",
    "location_current": "📍 Current location: {location}",
    "location_confirm_coords": "📍 Set your location to coordinates <b>{lat}, {lon}</b>?",
    "location_confirm_name": "📍 Set your location to <b>{name}</b>?",
    "location_confirm_change": "📍 Change your location from <b>{current}</b> to <b>{new}</b>?",
    "location_saved": "✅ Location saved: <b>{name}</b>",
    "location_cleared": "🗑 Location cleared.",
    "location_ignored": "👍 Understood, I won't set that as your location.",

    # timezone
    "btn_timezone": "🕐 Timezone",
    "timezone_prompt": "🕐 Pick your timezone, or send /settimezone &lt;Area/City&gt;.",
    "timezone_confirm": "🕐 Set your timezone to <b>{timezone}</b>? Local time there is {time}.",
    "timezone_saved": "✅ Timezone set to <b>{timezone}</b> (local time {time}).",
    "timezone_ignored": "✅ Timezone setting cancelled",

    # settings
    "settings_title": "Settings",
    "label_location": "Location",
    "label_timezone": "Timezone",
    "label_language": "Language",
    "label_units": "Units",
    "label_role": "Role",
    "value_not_set": "not set",
    "btn_language": "🌐 Language",
    "btn_units": "📏 Units",
    "language_prompt": "🌐 Choose your language:",
    "language_saved": "✅ Language set to {language}.",
    "units_prompt": "📏 Choose units:",
    "units_metric": "Metric (°C, km/h)",
    "units_imperial": "Imperial (°F, mph)",
    "units_saved": "✅ Units set to {units}.",

    # alerts
    "alert_menu": "🔔 What should I watch?",
    "alert_choose_preset": "🔔 {type} alert: pick a starting threshold (you can fine-tune it afterwards).",
    "preset_temp_high": "🔥 Above {value}°C",
    "preset_temp_low": "🥶 Below {value}°C",
    "preset_humidity_high": "💧 Above {value}%",
    "preset_humidity_low": "🏜 Below {value}%",
    "preset_pressure_high": "⬆️ Above {value} hPa",
    "preset_pressure_low": "⬇️ Below {value} hPa",
    "preset_wind_high": "💨 Above {value} km/h",
    "preset_uv_high": "☀️ UV above {value}",
    "preset_air_moderate": "🟡 AQI above {value}",
    "preset_air_unhealthy": "🔴 AQI above {value}",
    "preset_air_hazardous": "🟤 AQI above {value}",
    "alert_created": "✅ Alert created: {alert}",
    "alert_updated": "✅ Alert updated: {alert}",
    "alert_removed": "🗑 Alert removed.",
    "alert_edit": "✏️ {alert}\n\nPick a new threshold:",
    "alert_choose_operator": "✏️ {alert}\n\nPick a comparison:",
    "alerts_title": "🔔 <b>Your alerts</b>",
    "alerts_empty": "🔕 You have no alerts yet.",
    "btn_add_alert": "➕ Add alert",
    "btn_my_alerts": "🔔 My alerts",
    "btn_edit_threshold": "✏️ Edit threshold",
    "btn_change_operator": "↔️ Change comparison",
    "alert_triggered": "{emoji} <b>{title}</b>\n{description}\nThreshold: {threshold}\nSeverity: {severity}",

    # subscriptions
    "notifications_menu": "📬 Which notification would you like to add?",
    "notifications_choose_time": "🕐 {type}: when should I send it? (your local time)",
    "notifications_info": (
        "ℹ️ Daily notifications arrive every day at the chosen time, weekly ones on Sundays. "
        "Alert digests summarise your active alerts. Times use your timezone from settings."
    ),
    "subscription_created": "✅ Subscribed: {subscription} ({timezone})",
    "subscription_needs_location": "📍 Set a location so I know where to report from.",
    "subscription_deleted": "🗑 Notification removed.",
    "subscriptions_title": "📬 <b>Your notifications</b>",
    "subscriptions_empty": "📭 You have no notifications yet.",
    "btn_add_notification": "➕ Add notification",
    "btn_manage_notifications": "📋 Manage notifications",
    "scheduled_daily_title": "☀️ Your daily weather",
    "scheduled_weekly_title": "📅 Your weekly forecast",
    "scheduled_alerts_title": "🔔 Your alerts digest",
    "scheduled_no_alerts": "No active alerts.",

    # export
    "export_menu": "📤 What would you like to export?",
    "export_choose_format": "📤 {type}: choose a format",
    "export_type_weather": "🌤 Current weather",
    "export_type_alerts": "🔔 Alerts",
    "export_type_subscriptions": "📬 Notifications",
    "export_type_all": "📦 Everything",
    "export_ready": "📎 Here is your export.",

    # admin
    "admin_menu": "🛠 Admin panel",
    "btn_stats": "📊 Statistics",
    "btn_stats_detailed": "📈 Detailed",
    "btn_users_recent": "👥 Recent users",
    "btn_users_roles": "🎖 By role",
    "stats_title": "Bot statistics",
    "stats_total_users": "Total users",
    "stats_active_users": "Active users",
    "stats_new_users": "New in 24h",
    "stats_with_location": "With location",
    "stats_alerts": "Active alerts",
    "stats_subscriptions": "Active notifications",
    "admin_users_title": "👥 <b>Users</b> ({count})",
    "admin_users_empty": "No users yet.",
    "admin_role_hint": "Use /promote &lt;user_id&gt; [moderator|admin] or /demote &lt;user_id&gt;.",

    # roles
    "usage_promote": "Usage: /promote &lt;user_id&gt; [moderator|admin]",
    "usage_demote": "Usage: /demote &lt;user_id&gt;",
    "role_confirm_promote": "⬆️ Promote {user}?\n\nCurrent role: <b>{current}</b>\nNew role: <b>{new}</b>",
    "role_confirm_demote": "⬇️ Demote {user}?\n\nCurrent role: <b>{current}</b>\nNew role: <b>{new}</b>",
    "role_demote_admin_warning": "⚠️ Warning: Demoting an Admin is a significant action.",
    "role_changed": "✅ Role of {user} changed from <b>{old}</b> to <b>{new}</b>.",
    "role_change_cancelled": "Role change cancelled.",

    # errors
    "error_generic": "Something went wrong.",
    "error_failed_try_again": "Failed, please try again.",
    "error_weather_unavailable": "Weather service is unavailable right now, please try again later.",
    "error_invalid_request": "This button is no longer valid.",
    "error_request_too_long": "That is too long to handle, please shorten it.",
    "error_invalid_timezone": "Unknown timezone <b>{timezone}</b>. Use a name like Europe/Kyiv.",
    "error_invalid_location": "That location is not valid.",
    "error_location_not_found": "I couldn't find <b>{name}</b>.",
    "error_coordinates_range": "Coordinates out of range: latitude must be within ±90 and longitude within ±180.",
    "error_no_location": "📍 You haven't set a location yet.",
    "error_insufficient_permissions": "Insufficient permissions.",
    "error_not_found": "Not found.",
    "error_user_not_found": "User {user_id} not found.",
    "error_alert_not_found": "Alert not found.",
    "error_subscription_not_found": "Notification not found.",
    "error_unknown_role": "Unknown role <b>{role}</b>. Use moderator or admin.",
    "error_illegal_role_transition": "That role change is not allowed.",
    "error_role_change": "That role change is not allowed.",
    "error_role_moderator_first": "Cannot promote User directly to Admin. Promote to Moderator first.",
    "error_role_already_admin": "User is already an Admin (highest role).",
    "error_role_already_has": "User is already a {role}.",
    "error_role_not_promotion": "That would not be a promotion, use /demote.",
    "error_role_already_lowest": "User already has the lowest role.",
    "error_role_single_step": "Roles change one step at a time; the next step down is {role}.",
    "error_role_own": "You cannot change your own role.",
    "error_role_invalid": "Invalid role value.",
    "error_role_last_admin": "Cannot demote the last admin.",
}

UK = {
    "main_menu": "🏠 Головне меню",
    "btn_weather": "🌤 Погода",
    "btn_forecast": "📅 Прогноз",
    "btn_air": "🌬 Якість повітря",
    "btn_alerts": "🔔 Сповіщення",
    "btn_settings": "⚙️ Налаштування",
    "btn_back": "⬅️ Назад",
    "btn_confirm": "✅ Підтвердити",
    "btn_ignore": "❌ Ігнорувати",
    "btn_keep_current": "📍 Залишити поточне",
    "btn_cancel": "❌ Скасувати",
    "location_confirm_coords": "📍 Встановити ваше місцезнаходження на координати <b>{lat}, {lon}</b>?",
    "location_confirm_name": "📍 Встановити ваше місцезнаходження: <b>{name}</b>?",
    "location_confirm_change": "📍 Змінити ваше місцезнаходження з <b>{current}</b> на <b>{new}</b>?",
    "location_saved": "✅ Місцезнаходження збережено: <b>{name}</b>",
    "location_ignored": "👍 Зрозуміло, я не встановлюватиму це як ваше місцезнаходження.",
    "timezone_confirm": "🕐 Встановити часовий пояс <b>{timezone}</b>? Місцевий час: {time}.",
    "timezone_saved": "✅ Часовий пояс встановлено: <b>{timezone}</b> (місцевий час {time}).",
    "timezone_ignored": "✅ Налаштування часового поясу скасовано",
    "language_saved": "✅ Мову змінено на {language}.",
    "role_change_cancelled": "Зміну ролі скасовано.",
    "error_failed_try_again": "Не вдалося, спробуйте ще раз.",
    "error_insufficient_permissions": "Недостатньо прав.",
    "error_invalid_request": "Ця кнопка більше не дійсна.",
    "error_no_location": "📍 Ви ще не встановили місцезнаходження.",
}

CATALOGS = {"en": EN, "uk": UK}

LANGUAGE_NAMES = {
    "en": "🇬🇧 English",
    "uk": "🇺🇦 Українська",
}
