# gui/calendar_widget.py
import calendar
from PySide6.QtWidgets import QWidget, QVBoxLayout, QGridLayout, QLabel, QTextEdit, QFrame, QMenu
from PySide6.QtCore import Qt, QPoint

from clinic_scheduler.models.schedule import SLOTS, slot_key


class CalendarWidget(QWidget):
    def __init__(self, on_toggle_holiday=None):
        super().__init__()
        self.on_toggle_holiday = on_toggle_holiday
        self.vbox = QVBoxLayout(self)

        header = QGridLayout()
        self.vbox.addLayout(header)
        weekdays = ("일", "월", "화", "수", "목", "금", "토")
        for c, w in enumerate(weekdays):
            lbl = QLabel(w); lbl.setAlignment(Qt.AlignCenter)
            header.addWidget(lbl, 0, c)

        self.grid = QGridLayout()
        self.vbox.addLayout(self.grid)

    def clear_grid(self):
        while self.grid.count():
            item = self.grid.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)

    def render_month(self, year, month, state, duty_weekday):
        self.clear_grid()
        cal = calendar.Calendar(firstweekday=6)  # Sunday
        weeks = cal.monthdayscalendar(year, month)

        for r, week in enumerate(weeks):
            for c, day in enumerate(week):
                cell = QFrame()
                cell.setFrameShape(QFrame.StyledPanel)
                v = QVBoxLayout(cell)
                if day == 0:
                    self.grid.addWidget(cell, r, c)
                    continue

                day_lbl = QLabel(str(day))
                day_lbl.setAlignment(Qt.AlignTop | Qt.AlignRight)
                v.addWidget(day_lbl)

                key = f"{year:04d}-{month:02d}-{day:02d}"
                is_duty = calendar.weekday(year, month, day) == duty_weekday
                content = []
                if state.is_holiday(key):
                    content.append("[휴일]")
                    cell.setStyleSheet("background:#f3f3f3;")
                elif is_duty:
                    # 당직 요일: AM/PM 담당자
                    for slot in SLOTS:
                        value = state.schedule.get(slot_key(key, slot))
                        content.append(f"{slot}  {state.display_name(value) if value is not None else '-'}")
                    cell.setStyleSheet("background:#eef5ff;")

                text = QTextEdit()
                text.setReadOnly(True)
                text.setTextInteractionFlags(Qt.NoTextInteraction)
                text.setFocusPolicy(Qt.NoFocus)
                text.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
                text.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
                text.setContextMenuPolicy(Qt.NoContextMenu)
                text.setPlainText("\n".join(content))
                v.addWidget(text)
                v.setSpacing(6)

                # 우클릭 메뉴 → 휴일 지정/해제
                def ctx_menu(point: QPoint, k=key, w=cell):
                    if not self.on_toggle_holiday:
                        return
                    menu = QMenu(self)
                    label = "휴일 해제" if state.is_holiday(k) else "휴일 지정(배정 삭제)"
                    act = menu.addAction(label)
                    if menu.exec(w.mapToGlobal(point)) == act:
                        self.on_toggle_holiday(k)

                cell.setContextMenuPolicy(Qt.CustomContextMenu)
                cell.customContextMenuRequested.connect(ctx_menu)

                self.grid.addWidget(cell, r, c)
