"""
核心遊戲邏輯層

這個 package 包含所有核心遊戲邏輯，包括：
- 狀態機：集中管理回合的所有狀態轉換
- AvailabilityTracker：齒輪離盒/回盒的邊緣偵測
- SessionTimer：整場倒數與成功次數
- Scheduler：取代 coroutine 的延遲動作
- Manager：管理 Session 的生命週期
- Locks：並發控制工具
"""
