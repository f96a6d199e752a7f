"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- RecipeService：每回合的 Recipe 生成
- GestureService：滑鼠階段的進度累積
- ScoringService：放置結果比對
- RoundPhaseService：回合狀態特性判斷
- NamingService：Session 代碼生成
- HistoryService：回合紀錄整理
"""
