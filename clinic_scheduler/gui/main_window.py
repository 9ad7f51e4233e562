# gui/main_window.py
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QToolBar, QPushButton,
    QLabel, QTableWidget, QTableWidgetItem, QSizePolicy, QMessageBox,
    QLineEdit, QComboBox, QGroupBox, QGridLayout, QHeaderView, QAbstractItemView,
    QSplitter, QSpinBox, QDateEdit, QCheckBox, QListWidget, QListWidgetItem
)
from PySide6.QtCore import Qt, QDate, QTimer
from datetime import date

from clinic_scheduler.config import FAIRNESS_POLICIES, DEFAULT_LIMIT
from clinic_scheduler.exceptions import ConflictError, StoreError, ValidationError
from clinic_scheduler.gui.calendar_widget import CalendarWidget
from clinic_scheduler.utils.date_helper import duty_dates, shift_month

FAIRNESS_LABELS = {"yearly": "연간 누적 반영", "run": "이번 달만"}


class MainWindow(QMainWindow):
    def __init__(self, session):
        super().__init__()
        self.setWindowTitle("수요일 당직 스케줄러")
        self.resize(1280, 900)

        today = date.today()
        self.year = today.year
        self.month = today.month

        self.session = session
        self._editing_name = None  # 현재 편집 중인 직원 이름

        self._build_ui()
        self.refresh()

    # ---------------- UI ----------------
    def _build_ui(self):
        tb = QToolBar()
        self.addToolBar(tb)

        btn_prev = QPushButton("◀ 이전달")
        btn_prev.clicked.connect(self.prev_month)
        tb.addWidget(btn_prev)

        self.month_label = QLabel("")
        self.month_label.setStyleSheet("font-weight:600; padding:0 8px;")
        tb.addWidget(self.month_label)

        btn_next = QPushButton("다음달 ▶")
        btn_next.clicked.connect(self.next_month)
        tb.addWidget(btn_next)

        tb.addSeparator()

        btn_gen = QPushButton("이번 달 배정 생성")
        btn_gen.setToolTip("보이는 달의 당직일(AM/PM)을 모두 다시 배정")
        btn_gen.clicked.connect(self.run_generate_current_month)
        tb.addWidget(btn_gen)

        tb.addWidget(QLabel(" 공정성 "))
        self.cmb_fairness = QComboBox()
        for key in FAIRNESS_POLICIES:
            self.cmb_fairness.addItem(FAIRNESS_LABELS[key], userData=key)
        self.cmb_fairness.setCurrentIndex(FAIRNESS_POLICIES.index(self.session.settings.fairness))
        tb.addWidget(self.cmb_fairness)

        tb.addSeparator()

        btn_reload = QPushButton("다시 불러오기")
        btn_reload.setToolTip("저장소 내용으로 화면을 맞춥니다(저장되지 않은 변경은 사라짐)")
        btn_reload.clicked.connect(self.reload)
        tb.addWidget(btn_reload)

        central = QWidget()
        self.setCentralWidget(central)
        root = QHBoxLayout(central)
        root.setContentsMargins(0, 0, 0, 0)

        splitter = QSplitter(Qt.Horizontal)
        splitter.setHandleWidth(2)
        root.addWidget(splitter)

        # ----- 좌측: 직원 / 근무 불가 -----
        left_container = QWidget()
        left = QVBoxLayout(left_container)

        # (A) 직원 편집
        self.edit_box = QGroupBox("직원 추가/편집")
        form = QGridLayout(self.edit_box)
        r = 0
        self.user_name = QLineEdit()
        form.addWidget(QLabel("이름*"), r, 0); form.addWidget(self.user_name, r, 1); r += 1

        self.user_limit = QSpinBox(); self.user_limit.setRange(1, 31); self.user_limit.setValue(DEFAULT_LIMIT)
        form.addWidget(QLabel("월 한도"), r, 0); form.addWidget(self.user_limit, r, 1); r += 1

        btn_bar = QHBoxLayout()
        self.btn_new_user = QPushButton("초기화")
        self.btn_save_user = QPushButton("저장")
        self.btn_del_user = QPushButton("직원 삭제")
        btn_bar.addWidget(self.btn_new_user)
        btn_bar.addWidget(self.btn_save_user)
        btn_bar.addWidget(self.btn_del_user)
        form.addLayout(btn_bar, r, 1)
        left.addWidget(self.edit_box)

        # (B) 직원 목록 + 횟수
        left.addWidget(QLabel("직원 목록 (당직 횟수)"))
        self.user_table = QTableWidget(0, 4)
        self.user_table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.user_table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.user_table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.user_table.setHorizontalHeaderLabels(["이름", "한도", "월간", "연간"])
        self.user_table.setSizePolicy(QSizePolicy.Preferred, QSizePolicy.Expanding)
        header = self.user_table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.Stretch)
        for i in range(1, 4):
            header.setSectionResizeMode(i, QHeaderView.Fixed)
            self.user_table.setColumnWidth(i, 48)
        left.addWidget(self.user_table)

        # (C) 근무 불가
        self.cons_box = QGroupBox("근무 불가")
        cg = QGridLayout(self.cons_box)
        self.cons_user = QComboBox()
        cg.addWidget(QLabel("직원"), 0, 0); cg.addWidget(self.cons_user, 0, 1, 1, 2)
        self.cons_date = QDateEdit(QDate.currentDate()); self.cons_date.setCalendarPopup(True)
        self.cons_date.setDisplayFormat("yyyy-MM-dd")
        cg.addWidget(QLabel("날짜"), 1, 0); cg.addWidget(self.cons_date, 1, 1, 1, 2)
        self.chk_am = QCheckBox("AM")
        self.chk_pm = QCheckBox("PM")
        cg.addWidget(self.chk_am, 2, 1); cg.addWidget(self.chk_pm, 2, 2)
        self.btn_add_cons = QPushButton("추가")
        cg.addWidget(self.btn_add_cons, 3, 2)
        self.cons_list = QListWidget()
        cg.addWidget(self.cons_list, 4, 0, 1, 3)
        self.btn_del_cons = QPushButton("선택 항목 삭제")
        cg.addWidget(self.btn_del_cons, 5, 2)
        left.addWidget(self.cons_box)

        left_container.setMinimumWidth(320)
        left_container.setMaximumWidth(320)

        # ----- 우측: 달력 -----
        right_container = QWidget()
        right = QVBoxLayout(right_container)
        self.calendar = CalendarWidget(on_toggle_holiday=self.toggle_holiday)
        right.addWidget(self.calendar)

        splitter.addWidget(left_container)
        splitter.addWidget(right_container)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        splitter.setCollapsible(1, False)
        splitter.setSizes([left_container.minimumWidth(), 10_000])

        # 시그널
        self.user_table.itemSelectionChanged.connect(self._on_user_selected)
        self.btn_new_user.clicked.connect(self._clear_user_form)
        self.btn_save_user.clicked.connect(self._save_user_form)
        self.btn_del_user.clicked.connect(self._delete_selected_user)
        self.btn_add_cons.clicked.connect(self._add_constraint)
        self.btn_del_cons.clicked.connect(self._remove_selected_constraint)

        self.status = self.statusBar()

    # ---------------- 데이터/바인딩 ----------------
    def _fill_user_table(self):
        self.user_table.setRowCount(0)
        for row in self.session.count_table(self.year, self.month):
            r = self.user_table.rowCount()
            self.user_table.insertRow(r)
            for c, val in enumerate((row.name, row.limit, row.month, row.year)):
                item = QTableWidgetItem(str(val))
                item.setData(Qt.UserRole, row.name)
                self.user_table.setItem(r, c, item)

    def _fill_constraints(self):
        current = self.cons_user.currentText()
        self.cons_user.clear()
        self.cons_user.addItems([p.name for p in self.session.state.roster])
        if current:
            self.cons_user.setCurrentText(current)

        self.cons_list.clear()
        for name, d, slot in self.session.constraint_rows():
            item = QListWidgetItem(f"{name} – {d} ({slot})")
            item.setData(Qt.UserRole, (name, d, slot))
            self.cons_list.addItem(item)

    def _on_user_selected(self):
        row = self.user_table.currentRow()
        if row < 0:
            return
        name = self.user_table.item(row, 0).data(Qt.UserRole)
        p = self.session.state.person_by_name(name)
        if not p:
            return
        self._editing_name = p.name
        self.user_name.setText(p.name)
        self.user_limit.setValue(p.limit)

    def _clear_user_form(self):
        self._editing_name = None
        self.user_name.clear()
        self.user_limit.setValue(DEFAULT_LIMIT)
        self.user_table.clearSelection()

    # ---------------- 조작 공통 ----------------
    def _run(self, action, *args, done: str = "") -> bool:
        """로컬 반영 → 즉시 다시 그림 → 저장소 전송은 이벤트 루프 다음 차례에"""
        try:
            mutations = action(*args)
        except (ValidationError, ConflictError, StoreError) as e:
            QMessageBox.warning(self, "확인", str(e))
            return False
        if not mutations:
            return False
        self.refresh()
        if done:
            self.status.showMessage(done, 3000)
        QTimer.singleShot(0, self._flush)
        return True

    def _flush(self):
        failures = self.session.flush()
        if failures:
            detail = "\n".join(str(f) for f in failures[:10])
            QMessageBox.warning(
                self, "저장 실패",
                f"{len(failures)}건을 저장소에 반영하지 못했습니다.\n"
                f"화면 내용은 유지되지만 저장소와 다를 수 있습니다.\n'다시 불러오기'로 맞출 수 있습니다.\n\n{detail}"
            )
        self._update_status()

    def _update_status(self):
        msg = (f"직원 {len(self.session.state.roster)}명, "
               f"근무 불가 {len(self.session.state.constraints)}건, 휴일 {len(self.session.state.holidays)}일")
        if self.session.diverged:
            msg += "  |  ※ 저장소와 불일치 (다시 불러오기 필요)"
        self.status.showMessage(msg)

    # ---------------- 직원 ----------------
    def _save_user_form(self):
        name = self.user_name.text().strip()
        limit = self.user_limit.value()
        if self._editing_name is None:
            if self._run(self.session.add_user, name, limit, done=f"[{name}] 추가 완료."):
                self._clear_user_form()
        else:
            if self._run(self.session.edit_user, self._editing_name, name, limit, done="수정 완료."):
                self._editing_name = name

    def _delete_selected_user(self):
        row = self.user_table.currentRow()
        if row < 0:
            QMessageBox.information(self, "안내", "삭제할 직원을 선택해주세요.")
            return
        name = self.user_table.item(row, 0).data(Qt.UserRole)
        if QMessageBox.question(self, "확인", f"[{name}]을(를) 삭제하시겠습니까?\n근무 불가 일정도 함께 삭제됩니다.") != QMessageBox.Yes:
            return
        self._clear_user_form()
        self._run(self.session.delete_user, name, done=f"[{name}] 삭제 완료.")

    # ---------------- 근무 불가 ----------------
    def _add_constraint(self):
        qd = self.cons_date.date()
        slots = [s for s, cb in (("AM", self.chk_am), ("PM", self.chk_pm)) if cb.isChecked()]
        picked = date(qd.year(), qd.month(), qd.day())
        if self._run(self.session.add_constraint, self.cons_user.currentText(), picked, slots,
                     done="근무 불가 추가 완료."):
            self.chk_am.setChecked(False)
            self.chk_pm.setChecked(False)

    def _remove_selected_constraint(self):
        item = self.cons_list.currentItem()
        if item is None:
            QMessageBox.information(self, "안내", "삭제할 항목을 선택해주세요.")
            return
        name, d, slot = item.data(Qt.UserRole)
        self._run(self.session.remove_constraint, name, d, slot, done="근무 불가 삭제 완료.")

    # ---------------- 달력 ----------------
    def toggle_holiday(self, date_key: str):
        self._run(self.session.toggle_holiday, date_key, done=f"{date_key} 휴일 변경.")

    def refresh(self):
        self._fill_user_table()
        self._fill_constraints()
        self.calendar.render_month(self.year, self.month, self.session.state, self.session.settings.duty_weekday)
        n = len(duty_dates(self.year, self.month, self.session.settings.duty_weekday))
        self.month_label.setText(f"{self.year}-{self.month:02d}  (당직일 {n}일)")
        self._update_status()

    def reload(self):
        try:
            self.session.reload()
        except StoreError as e:
            QMessageBox.warning(self, "불러오기 실패", str(e))
            return
        self._clear_user_form()
        self.refresh()

    def run_generate_current_month(self):
        policy = self.cmb_fairness.currentData()
        mb = QMessageBox(self)
        mb.setIcon(QMessageBox.Question)
        mb.setWindowTitle("배정 생성 확인")
        mb.setText(
            f"{self.year}-{self.month:02d} 당직을 새로 배정할까요?\n"
            f"※ 이 달의 기존 배정은 모두 다시 계산됩니다. (공정성: {FAIRNESS_LABELS[policy]})"
        )
        mb.setStandardButtons(QMessageBox.Yes | QMessageBox.No)
        mb.setDefaultButton(QMessageBox.No)
        mb.button(QMessageBox.Yes).setText("예")
        mb.button(QMessageBox.No).setText("아니오")
        if mb.exec() != QMessageBox.Yes:
            self.status.showMessage("배정 생성을 취소했습니다.", 3000)
            return

        if self._run(self.session.generate, self.year, self.month, policy):
            report = self.session.last_report
            QMessageBox.information(
                self, "완료",
                f"{self.year}-{self.month:02d} 배정 완료\n"
                f"당직일 {len(report.dates)}일 / 미배정 {len(report.unassigned)}칸 / 휴일 {len(report.holidays)}일"
            )

    def prev_month(self):
        self.year, self.month = shift_month(self.year, self.month, -1)
        self.refresh()

    def next_month(self):
        self.year, self.month = shift_month(self.year, self.month, 1)
        self.refresh()
